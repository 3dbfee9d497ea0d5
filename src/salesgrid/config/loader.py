import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_CONFIG_PATH = Path("salesgrid.config.yaml")
BASE_URL_ENV = "SALESGRID_BASE_URL"

ALLOWED_CONTROLS = ("input", "select", "button")

DEFAULT_CONFIG: Dict[str, Any] = {
    "version": 1,
    "api": {
        "base_url": "https://webinars.webdev.education-services.ru/sp7-api",
        "timeout_seconds": 20,
        "user_agent": "salesgrid/0.1",
        "reference": {
            "sellers": "sellers",
            "customers": "customers",
        },
    },
    "table": {
        "rows_per_page": 10,
        "page_window": 5,
        "sort_columns": ["date", "total"],
        "sort_values": {"asc": "asc", "desc": "desc"},
        "filters": [
            {"name": "date", "control": "input"},
            {"name": "customer", "control": "input"},
            {"name": "seller", "control": "select", "lookup": "sellers"},
            {"name": "totalFrom", "control": "input"},
            {"name": "totalTo", "control": "input"},
        ],
    },
}


def _merge_sections(user_config: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user sections over the built-in defaults, one level deep."""
    merged = deepcopy(DEFAULT_CONFIG)
    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _normalize_filter_entry(entry: Any) -> Dict[str, Any]:
    """
    Normalize a single filter entry so every consumer sees the same schema.

    A bare string is shorthand for an input control.
    """
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, dict):
        raise ValueError("Each filter entry must be a string or dictionary")

    name = entry.get("name")
    if not name or not isinstance(name, str):
        raise ValueError("Filter entry missing 'name'")

    control = str(entry.get("control", "input")).lower()
    if control not in ALLOWED_CONTROLS:
        raise ValueError(f"Filter '{name}' has unknown control '{control}'")

    return {
        "name": name,
        "control": control,
        "lookup": entry.get("lookup"),
    }


def _validate(config: Dict[str, Any]) -> None:
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    if "version" not in config:
        raise ValueError("Config must have 'version' field")

    api = config.get("api")
    if not isinstance(api, dict) or not api.get("base_url"):
        raise ValueError("Config 'api.base_url' is required")
    if not isinstance(api.get("reference", {}), dict):
        raise ValueError("Config 'api.reference' must be a dictionary")

    table = config.get("table")
    if not isinstance(table, dict):
        raise ValueError("Config 'table' must be a dictionary")
    for key in ("rows_per_page", "page_window"):
        value = table.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ValueError(f"Config 'table.{key}' must be a positive integer")
    if not isinstance(table.get("sort_columns", []), list):
        raise ValueError("Config 'table.sort_columns' must be a list")
    sort_values = table.get("sort_values", {})
    if not isinstance(sort_values, dict) or not set(sort_values) <= {"asc", "desc"}:
        raise ValueError("Config 'table.sort_values' must map asc/desc to order tokens")
    if not isinstance(table.get("filters", []), list):
        raise ValueError("Config 'table.filters' must be a list")


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load salesgrid configuration from YAML file.

    A missing default file falls back to the built-in defaults; a missing
    explicit path is an error.

    Args:
        path: Optional path to the config file. Defaults to salesgrid.config.yaml

    Returns:
        Dictionary with the merged, validated configuration

    Raises:
        FileNotFoundError: If an explicit config path doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError("Config must be a dictionary")
    elif path is not None:
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    else:
        user_config = {}

    config = _merge_sections(user_config)
    _validate(config)

    env_base_url = os.getenv(BASE_URL_ENV)
    if env_base_url:
        config["api"]["base_url"] = env_base_url

    config["table"]["filters"] = [
        _normalize_filter_entry(entry) for entry in config["table"].get("filters", [])
    ]
    config["table"]["sort_columns"] = [str(col) for col in config["table"].get("sort_columns", [])]
    config["table"]["sort_values"] = {str(k): str(v) for k, v in config["table"].get("sort_values", {}).items()}
    return config


def get_filter_fields(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return the normalized filter entries from a loaded config."""
    return list(config.get("table", {}).get("filters", []))
