"""Fixed-order composition of the query stages."""

from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

from salesgrid.utils.logging import get_logger

from .actions import Action
from .filtering import FilteringStage
from .pagination import PaginationStage, PaginationState
from .searching import SearchStage
from .sorting import SortRegistry, SortStage
from .stage import Query, QueryStage
from .state import StatePatch, TableState

logger = get_logger(__name__)


class ComposedQuery(NamedTuple):
    query: Query
    state: TableState
    patch: StatePatch


class QueryPipeline:
    """
    Runs Search -> Filtering -> Sort -> Pagination once per render cycle.

    Every stage sees the same action. State patches produced by a stage are
    applied before the next stage runs, and the patched state is returned to
    the caller alongside the query.
    """

    def __init__(
        self,
        sort_registry: SortRegistry,
        pagination: PaginationState,
        filter_fields: Iterable[Mapping[str, Any]],
        sort_values: Optional[Mapping[str, str]] = None,
    ):
        self.sort_registry = sort_registry
        self.pagination = pagination
        self.filtering = FilteringStage(filter_fields)
        self.stages: List[QueryStage] = [
            SearchStage(),
            self.filtering,
            SortStage(sort_registry, sort_values),
            PaginationStage(pagination),
        ]

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "QueryPipeline":
        table = config.get("table", {})
        return cls(
            SortRegistry(table.get("sort_columns", [])),
            PaginationState(window=table.get("page_window", 5)),
            table.get("filters", []),
            table.get("sort_values"),
        )

    def compose(self, state: TableState, action: Optional[Action] = None) -> ComposedQuery:
        """
        Build the query descriptor for one render cycle.

        Args:
            state: Current state snapshot
            action: Action that triggered the cycle, or None

        Returns:
            ComposedQuery with the query, the patched state and the combined patch
        """
        query: Query = {}
        patch = StatePatch()
        current = state
        for stage in self.stages:
            query, stage_patch = stage.apply(query, current, action)
            if not stage_patch.is_empty():
                current = stage_patch.apply(current)
                patch = patch.merge(stage_patch)

        logger.debug(f"Composed query {query} for action {action!r}")
        return ComposedQuery(query, current, patch)
