"""Base contract for query stages."""

from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Optional

from .actions import Action
from .state import StatePatch, TableState

Query = Dict[str, str]


class StageResult(NamedTuple):
    query: Query
    patch: StatePatch


class QueryStage(ABC):
    """A pure transform contributing its own keys to the query."""

    @abstractmethod
    def apply(self, query: Query, state: TableState, action: Optional[Action]) -> StageResult:
        """
        Contribute this stage's keys to a copy of the query.

        Args:
            query: Query built by earlier stages (not mutated)
            state: Current state snapshot
            action: Action that triggered the cycle, or None

        Returns:
            StageResult with the new query and any state changes to apply
        """
        pass
