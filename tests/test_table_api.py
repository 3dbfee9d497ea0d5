"""Tests for the render-cycle facade."""

import threading

import pytest

from salesgrid.api.table_api import TableView
from salesgrid.query.actions import ClearAction, LastAction, NextAction, SortAction
from salesgrid.query.state import TableState


@pytest.fixture
def view(config, fake_session):
    return TableView.from_config(config, session=fake_session)


def _state(**kwargs):
    filters = {"date": "", "customer": "", "seller": "", "totalFrom": "", "totalTo": ""}
    filters.update(kwargs.pop("filters", {}))
    return TableState(rows_per_page=10, filters=filters, **kwargs)


def test_init_loads_lookups_and_options(view, fake_session):
    lookups, options = view.init()

    assert options == {"seller": ["Alexey Petrov", "Maria Ivanova"]}
    assert lookups.customers["customer_1"] == "Ivan Sidorov"
    view.init()
    assert len(fake_session.calls_to("sellers")) == 1


def test_refresh_builds_snapshot(view):
    snapshot = view.refresh(_state(page=3))

    assert snapshot.query == {"limit": "10", "page": "3"}
    assert snapshot.records.total == 23
    assert snapshot.pagination.page_count == 3
    assert (snapshot.pagination.from_row, snapshot.pagination.to_row) == (21, 23)
    assert snapshot.pagination.visible_pages == [1, 2, 3]


def test_navigation_after_first_cycle(view):
    view.refresh(_state())
    snapshot = view.refresh(_state(), LastAction())

    assert snapshot.state.page == 3
    assert snapshot.query["page"] == "3"

    snapshot = view.refresh(snapshot.state, NextAction())
    assert snapshot.state.page == 3


def test_repeated_cycle_is_served_from_cache(view, fake_session):
    first = view.refresh(_state(search_text="Petrov"))
    second = view.refresh(_state(search_text="Petrov"))

    assert first.records is second.records
    assert len(fake_session.calls_to("records")) == 1

    view.refresh(_state(search_text="Petrov"), force_refresh=True)
    assert len(fake_session.calls_to("records")) == 2


def test_sort_and_clear_flow(view, fake_session):
    state = _state(filters={"seller": "Maria Ivanova"})
    snapshot = view.refresh(state, SortAction(field="date"))
    assert snapshot.query["sort"] == "date:asc"
    assert snapshot.query["filter[seller]"] == "Maria Ivanova"

    snapshot = view.refresh(snapshot.state, ClearAction(field="seller"))
    assert "filter[seller]" not in snapshot.query
    assert snapshot.state.filters["seller"] == ""
    assert snapshot.query["sort"] == "date:asc"
    assert "filter%5Bseller%5D" not in fake_session.calls_to("records")[-1]


def test_stale_response_does_not_move_page_count(view, fake_session, make_response, make_record):
    slow_started = threading.Event()
    release_slow = threading.Event()

    def records(url):
        if "search=slow" in url:
            slow_started.set()
            release_slow.wait(timeout=5)
            return make_response({"total": 230, "items": [make_record(1)]}, url=url)
        return make_response({"total": 5, "items": [make_record(2)]}, url=url)

    fake_session.routes["records"] = records

    slow_result = []
    slow = threading.Thread(target=lambda: slow_result.append(view.refresh(_state(search_text="slow"))))
    slow.start()
    assert slow_started.wait(timeout=5)

    fresh = view.refresh(_state())
    release_slow.set()
    slow.join(timeout=5)

    assert fresh.pagination.page_count == 1
    assert slow_result[0].pagination.page_count == 23
    assert view.pipeline.pagination.page_count == 1

    snapshot = view.refresh(_state(), LastAction())
    assert snapshot.query["page"] == "1"
    assert snapshot.records is fresh.records
