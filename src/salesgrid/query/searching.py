"""Search stage."""

from typing import Optional

from .actions import Action
from .stage import Query, QueryStage, StageResult
from .state import StatePatch, TableState

SEARCH_KEY = "search"


class SearchStage(QueryStage):
    """Adds `search=<text>` when the search box is non-empty. Ignores actions."""

    def __init__(self, param: str = SEARCH_KEY):
        self.param = param

    def apply(self, query: Query, state: TableState, action: Optional[Action]) -> StageResult:
        result = dict(query)
        if state.search_text:
            result[self.param] = state.search_text
        else:
            result.pop(self.param, None)
        return StageResult(result, StatePatch())
