"""Filter stage: one `filter[<field>]` parameter per non-empty filter control."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from salesgrid.utils.logging import get_logger

from .actions import Action, ClearAction
from .stage import Query, QueryStage, StageResult
from .state import StatePatch, TableState

if TYPE_CHECKING:
    from salesgrid.retrieval.lookups import Lookups

logger = get_logger(__name__)

# Controls whose value takes part in filtering; buttons and the like do not.
VALUE_CONTROLS = ("input", "select")


def filter_param(name: str) -> str:
    return f"filter[{name}]"


def is_filter_param(key: str) -> bool:
    return key.startswith("filter[") and key.endswith("]")


class FilteringStage(QueryStage):
    """
    Builds the filter part of the query from the state's filter values.

    Args:
        fields: Normalized filter entries ({"name", "control", "lookup"})
    """

    def __init__(self, fields: Iterable[Mapping[str, Any]]):
        self.fields: List[Dict[str, Any]] = [dict(f) for f in fields]
        self._by_name = {f["name"]: f for f in self.fields}

    @property
    def field_names(self) -> List[str]:
        return [f["name"] for f in self.fields]

    def _clear_patch(self, action: Optional[Action]) -> StatePatch:
        if not isinstance(action, ClearAction):
            return StatePatch()
        if action.field not in self._by_name:
            logger.warning(f"Ignoring clear on unknown filter '{action.field}'")
            return StatePatch()
        return StatePatch(filters={action.field: ""})

    def build_filters(self, state: TableState) -> Dict[str, str]:
        """Return {field: value} for value controls with a non-empty value."""
        filters: Dict[str, str] = {}
        for entry in self.fields:
            if entry.get("control", "input") not in VALUE_CONTROLS:
                continue
            value = state.filter_value(entry["name"])
            if value:
                filters[entry["name"]] = value
        return filters

    def apply(self, query: Query, state: TableState, action: Optional[Action]) -> StageResult:
        patch = self._clear_patch(action)
        filters = self.build_filters(patch.apply(state))

        # No filter keys at all means "unfiltered"
        result = {key: value for key, value in query.items() if not is_filter_param(key)}
        result.update({filter_param(name): value for name, value in filters.items()})
        return StageResult(result, patch)

    def options(self, lookups: "Lookups") -> Dict[str, List[str]]:
        """
        Option lists for select controls backed by a reference table.

        Returns:
            {filter field: label values} for every select field with a known lookup
        """
        options: Dict[str, List[str]] = {}
        for entry in self.fields:
            kind = entry.get("lookup")
            if entry.get("control") != "select" or not kind:
                continue
            if kind not in lookups.tables:
                logger.warning(f"Filter '{entry['name']}' references unknown lookup '{kind}'")
                continue
            options[entry["name"]] = lookups.values(kind)
        return options
