"""Tests for configuration loading."""

from pathlib import Path

import pytest

from salesgrid.config.loader import DEFAULT_CONFIG, get_filter_fields, load_config
from salesgrid.query.pipeline import QueryPipeline
from salesgrid.query.state import TableState


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SALESGRID_BASE_URL", raising=False)


def test_missing_default_file_uses_defaults():
    config = load_config()

    assert config["api"]["base_url"] == DEFAULT_CONFIG["api"]["base_url"]
    assert config["table"]["rows_per_page"] == 10
    assert {"name": "seller", "control": "select", "lookup": "sellers"} in get_filter_fields(config)


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_user_values_merge_over_defaults(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "version: 1\n"
        "api:\n"
        "  base_url: https://api.example.test\n"
        "table:\n"
        "  rows_per_page: 25\n"
        "  filters:\n"
        "    - date\n"
        "    - {name: seller, control: SELECT, lookup: sellers}\n"
    )

    config = load_config(path)

    assert config["api"]["base_url"] == "https://api.example.test"
    assert config["api"]["timeout_seconds"] == 20
    assert config["table"]["rows_per_page"] == 25
    assert config["table"]["page_window"] == 5
    assert get_filter_fields(config) == [
        {"name": "date", "control": "input", "lookup": None},
        {"name": "seller", "control": "select", "lookup": "sellers"},
    ]


def test_default_file_in_working_directory_is_used():
    Path("salesgrid.config.yaml").write_text("version: 1\ntable:\n  page_window: 7\n")

    assert load_config()["table"]["page_window"] == 7


def test_env_overrides_base_url(monkeypatch):
    monkeypatch.setenv("SALESGRID_BASE_URL", "https://env.example.test")

    assert load_config()["api"]["base_url"] == "https://env.example.test"


@pytest.mark.parametrize(
    "content, message",
    [
        ("- 1\n- 2\n", "must be a dictionary"),
        ("version: 1\ntable:\n  rows_per_page: 0\n", "rows_per_page"),
        ("version: 1\ntable:\n  filters:\n    - {control: input}\n", "missing 'name'"),
        ("version: 1\ntable:\n  filters:\n    - {name: x, control: slider}\n", "unknown control"),
        ("version: 1\ntable:\n  sort_values: {ascending: up}\n", "sort_values"),
    ],
)
def test_invalid_config_raises(tmp_path, content, message):
    path = tmp_path / "bad.yaml"
    path.write_text(content)

    with pytest.raises(ValueError, match=message):
        load_config(path)


def test_sort_values_reach_the_sort_stage():
    Path("salesgrid.config.yaml").write_text("version: 1\ntable:\n  sort_values: {asc: up, desc: down}\n")
    config = load_config()

    pipeline = QueryPipeline.from_config(config)
    pipeline.sort_registry.set("total", "desc")

    assert config["table"]["sort_values"] == {"asc": "up", "desc": "down"}
    assert pipeline.compose(TableState(rows_per_page=10)).query["sort"] == "total:down"
