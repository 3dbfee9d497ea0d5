"""Table API: one render cycle from UI state to display-ready data."""

from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import BaseModel

from ..query.actions import Action
from ..query.pipeline import QueryPipeline
from ..query.state import TableState
from ..query.pagination import PaginationDisplay
from ..retrieval.client import SalesApiClient
from ..retrieval.lookups import LookupCache
from ..retrieval.models import Lookups, RecordPage
from ..retrieval.records import RecordCache
from ..utils.logging import get_logger

logger = get_logger(__name__)


class TableSnapshot(BaseModel):
    """Everything the view layer needs to draw one cycle."""

    state: TableState
    query: Dict[str, str]
    records: RecordPage
    pagination: PaginationDisplay


class TableView:
    """
    Wires the pipeline to the caches.

    One instance owns the sort registry, pagination state and caches for a
    single table; tests construct independent instances.
    """

    def __init__(self, pipeline: QueryPipeline, records: RecordCache, lookups: LookupCache):
        self.pipeline = pipeline
        self.records = records
        self.lookups = lookups

    @classmethod
    def from_config(cls, config: Dict[str, Any], session: Optional[requests.Session] = None) -> "TableView":
        client = SalesApiClient.from_config(config, session=session)
        lookups = LookupCache(client, config.get("api", {}).get("reference"))
        return cls(
            QueryPipeline.from_config(config),
            RecordCache(client, lookups),
            lookups,
        )

    def init(self) -> Tuple[Lookups, Dict[str, List[str]]]:
        """
        Load reference data and the option lists for select filters.

        Raises:
            FetchError: If reference data cannot be loaded
        """
        lookups = self.lookups.get_lookups()
        return lookups, self.pipeline.filtering.options(lookups)

    def refresh(
        self,
        state: TableState,
        action: Optional[Action] = None,
        force_refresh: bool = False,
    ) -> TableSnapshot:
        """
        Run one render cycle.

        Args:
            state: Current state snapshot
            action: Action that triggered the cycle, or None
            force_refresh: Bypass the record cache

        Returns:
            TableSnapshot with the patched state, query, records and pagination

        Raises:
            FetchError: If records cannot be fetched
        """
        composed = self.pipeline.compose(state, action)
        records, stale = self.records.fetch_result(composed.query, force_refresh=force_refresh)

        page = int(composed.query["page"])
        limit = int(composed.query["limit"])
        if stale:
            # A newer cycle already set the page count
            pagination = self.pipeline.pagination.display(records.total, page, limit)
        else:
            pagination = self.pipeline.pagination.update(records.total, page, limit)
        logger.debug(f"Page {page}/{pagination.page_count}, rows {pagination.from_row}-{pagination.to_row} of {records.total}")

        return TableSnapshot(
            state=composed.state,
            query=composed.query,
            records=records,
            pagination=pagination,
        )
