"""Column sort state and the sort stage."""

import threading
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Tuple

from salesgrid.utils.logging import get_logger

from .actions import Action, SortAction
from .stage import Query, QueryStage, StageResult
from .state import StatePatch, TableState

logger = get_logger(__name__)

SORT_KEY = "sort"

# Order token sent per direction. Backends that expect other tokens (for
# example `up`/`down`) override this through `table.sort_values`.
DEFAULT_WIRE_VALUES = {"asc": "asc", "desc": "desc"}


class SortDirection(str, Enum):
    NONE = "none"
    ASC = "asc"
    DESC = "desc"


# none -> asc -> desc -> none
NEXT_DIRECTION = {
    SortDirection.NONE: SortDirection.ASC,
    SortDirection.ASC: SortDirection.DESC,
    SortDirection.DESC: SortDirection.NONE,
}


class SortRegistry:
    """
    Holds the sort direction of a fixed set of columns.

    At most one column is ever in a non-none direction.
    """

    def __init__(self, columns: Iterable[str]):
        self._columns: Dict[str, SortDirection] = {name: SortDirection.NONE for name in columns}
        self._lock = threading.Lock()

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(self._columns)

    def cycle(self, field: str) -> bool:
        """
        Advance one column's direction and reset every other column.

        Returns:
            False if the field is not a sortable column (nothing changes)
        """
        with self._lock:
            if field not in self._columns:
                logger.warning(f"Ignoring sort on unknown column '{field}'")
                return False
            next_direction = NEXT_DIRECTION[self._columns[field]]
            for name in self._columns:
                self._columns[name] = SortDirection.NONE
            self._columns[field] = next_direction
        logger.debug(f"Sort column '{field}' -> {next_direction.value}")
        return True

    def set(self, field: str, direction: SortDirection | str) -> bool:
        """Put one column in a given direction, resetting every other column."""
        direction = SortDirection(direction)
        with self._lock:
            if field not in self._columns:
                logger.warning(f"Ignoring sort on unknown column '{field}'")
                return False
            for name in self._columns:
                self._columns[name] = SortDirection.NONE
            self._columns[field] = direction
        return True

    def direction(self, field: str) -> SortDirection:
        with self._lock:
            return self._columns.get(field, SortDirection.NONE)

    def current(self) -> Tuple[Optional[str], Optional[SortDirection]]:
        """Return (field, direction) of the active column, or (None, None)."""
        with self._lock:
            for name, direction in self._columns.items():
                if direction is not SortDirection.NONE:
                    return name, direction
        return None, None


class SortStage(QueryStage):
    """Adds `sort=<field>:<value>` for the active column."""

    def __init__(self, registry: SortRegistry, wire_values: Optional[Mapping[str, str]] = None):
        self.registry = registry
        self.wire_values: Dict[str, str] = {**DEFAULT_WIRE_VALUES, **(wire_values or {})}

    def apply(self, query: Query, state: TableState, action: Optional[Action]) -> StageResult:
        if isinstance(action, SortAction):
            self.registry.cycle(action.field)

        field, direction = self.registry.current()
        result = dict(query)
        if field and direction is not None and direction is not SortDirection.NONE:
            result[SORT_KEY] = f"{field}:{self.wire_values[direction.value]}"
        else:
            result.pop(SORT_KEY, None)
        return StageResult(result, StatePatch())
