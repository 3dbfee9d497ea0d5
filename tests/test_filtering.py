"""Tests for the filter and search stages."""

from salesgrid.query.actions import ClearAction, NextAction
from salesgrid.query.filtering import FilteringStage
from salesgrid.query.searching import SearchStage
from salesgrid.query.state import TableState
from salesgrid.retrieval.models import Lookups

FIELDS = [
    {"name": "date", "control": "input"},
    {"name": "seller", "control": "select", "lookup": "sellers"},
    {"name": "clearAll", "control": "button"},
]


def _state(**filters):
    return TableState(rows_per_page=10, filters=filters)


def test_only_non_empty_fields_are_filtered():
    stage = FilteringStage(FIELDS)
    query, patch = stage.apply({}, _state(seller="", date="2024-01-01"), None)

    assert query == {"filter[date]": "2024-01-01"}
    assert patch.is_empty()


def test_no_values_means_no_filter_keys():
    stage = FilteringStage(FIELDS)
    query, _ = stage.apply({"page": "1"}, _state(seller="", date=""), None)

    assert query == {"page": "1"}


def test_non_value_controls_are_ignored():
    stage = FilteringStage(FIELDS)
    query, _ = stage.apply({}, _state(clearAll="yes"), None)

    assert query == {}


def test_clear_resets_field_and_excludes_it():
    stage = FilteringStage(FIELDS)
    state = _state(seller="Alexey Petrov", date="2024-01-01")

    query, patch = stage.apply({}, state, ClearAction(field="seller"))

    assert patch.filters == {"seller": ""}
    assert patch.apply(state).filters["seller"] == ""
    assert query == {"filter[date]": "2024-01-01"}
    # the snapshot itself is untouched
    assert state.filters["seller"] == "Alexey Petrov"


def test_clear_on_unknown_field_is_ignored():
    stage = FilteringStage(FIELDS)
    query, patch = stage.apply({}, _state(date="2024-01-01"), ClearAction(field="nope"))

    assert patch.is_empty()
    assert query == {"filter[date]": "2024-01-01"}


def test_navigation_actions_do_not_affect_filters():
    stage = FilteringStage(FIELDS)
    query, patch = stage.apply({}, _state(seller="Maria Ivanova"), NextAction())

    assert query == {"filter[seller]": "Maria Ivanova"}
    assert patch.is_empty()


def test_options_for_select_fields():
    stage = FilteringStage(FIELDS)
    lookups = Lookups(tables={"sellers": {"s1": "Alexey Petrov", "s2": "Maria Ivanova"}})

    assert stage.options(lookups) == {"seller": ["Alexey Petrov", "Maria Ivanova"]}


def test_search_sets_and_omits_key():
    stage = SearchStage()
    with_text = TableState(rows_per_page=10, search_text="Petrov")
    without_text = TableState(rows_per_page=10)

    assert stage.apply({}, with_text, None).query == {"search": "Petrov"}
    assert stage.apply({"search": "old"}, without_text, None).query == {}
