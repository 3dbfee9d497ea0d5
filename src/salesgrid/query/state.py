"""UI state snapshot and explicit state patches."""

from typing import Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class TableState(BaseModel):
    """Snapshot of the current control values, passed read-only into each cycle."""

    model_config = ConfigDict(frozen=True)

    rows_per_page: int
    page: int = 1
    filters: Dict[str, str] = Field(default_factory=dict)
    search_text: str = ""

    def filter_value(self, name: str) -> str:
        return self.filters.get(name, "") or ""


class StatePatch(BaseModel):
    """Changes a stage asks the caller to apply to the state."""

    page: Optional[int] = None
    filters: Dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.page is None and not self.filters

    def merge(self, other: "StatePatch") -> "StatePatch":
        """Combine two patches; values from `other` win."""
        return StatePatch(
            page=other.page if other.page is not None else self.page,
            filters={**self.filters, **other.filters},
        )

    def apply(self, state: TableState) -> TableState:
        """Return a new state with this patch applied."""
        if self.is_empty():
            return state
        update: Dict[str, object] = {}
        if self.page is not None:
            update["page"] = self.page
        if self.filters:
            update["filters"] = {**state.filters, **self.filters}
        return state.model_copy(update=update)


def collect_state(
    form: Mapping[str, Optional[str]],
    filter_fields: Iterable[str],
    default_rows_per_page: int = 10,
) -> TableState:
    """
    Build a TableState from raw form values.

    Args:
        form: Raw string values keyed by control name (rowsPerPage, page, search, filters)
        filter_fields: Names of the filter controls to pick up
        default_rows_per_page: Used when the form has no rowsPerPage value

    Returns:
        TableState with numeric fields parsed

    Raises:
        ValueError: If rowsPerPage or page is not an integer
    """
    raw_rows = form.get("rowsPerPage")
    raw_page = form.get("page")
    rows_per_page = int(raw_rows) if raw_rows not in (None, "") else default_rows_per_page
    page = int(raw_page) if raw_page not in (None, "") else 1

    filters = {name: (form.get(name) or "") for name in filter_fields}

    return TableState(
        rows_per_page=rows_per_page,
        page=page,
        filters=filters,
        search_text=form.get("search") or "",
    )
