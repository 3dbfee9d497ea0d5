"""Single-slot record cache and record denormalization."""

import threading
from typing import Mapping, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

from salesgrid.retrieval.cache_key import canonical_query_key
from salesgrid.retrieval.client import SalesApiClient
from salesgrid.retrieval.lookups import LookupCache
from salesgrid.retrieval.models import Lookups, RawRecord, Record, RecordPage
from salesgrid.utils.logging import get_logger

logger = get_logger(__name__)


def denormalize_record(raw: RawRecord, lookups: Lookups) -> Record:
    """Join seller/customer ids to their display labels."""
    return Record(
        id=raw.id,
        date=raw.date,
        seller_label=lookups.label("sellers", raw.seller_id),
        customer_label=lookups.label("customers", raw.customer_id),
        total_amount=raw.total_amount,
    )


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    sequence: int
    page: RecordPage


class FetchResult(NamedTuple):
    page: RecordPage
    stale: bool


class RecordCache:
    """
    Memoizes the last (query, result) pair.

    Only one entry is kept; it is replaced whole on every new distinct query
    or forced refresh. Each network fetch gets a sequence number and a
    response older than the last stored one is never written back.
    """

    def __init__(self, client: SalesApiClient, lookups: LookupCache):
        self.client = client
        self.lookups = lookups
        self._entry: Optional[CacheEntry] = None
        self._sequence = 0
        self._lock = threading.Lock()

    @property
    def entry(self) -> Optional[CacheEntry]:
        with self._lock:
            return self._entry

    def fetch(self, query: Mapping[str, str], force_refresh: bool = False) -> RecordPage:
        """
        Return the records for a query, hitting the network only when needed.

        Args:
            query: Composed query descriptor
            force_refresh: Ignore a matching cached entry

        Returns:
            RecordPage; the same object as the previous call when served from cache

        Raises:
            FetchError: If the records or reference fetch fails (cache unchanged)
        """
        return self.fetch_result(query, force_refresh=force_refresh).page

    def fetch_result(self, query: Mapping[str, str], force_refresh: bool = False) -> FetchResult:
        """
        Like fetch(), but also report whether the page was superseded.

        A stale result is returned to its caller but was not stored, because a
        later fetch already finished.
        """
        key = canonical_query_key(query)
        with self._lock:
            entry = self._entry
            if entry is not None and entry.key == key and not force_refresh:
                logger.debug(f"Record cache hit: {key}")
                return FetchResult(entry.page, stale=False)
            self._sequence += 1
            sequence = self._sequence

        logger.debug(f"Record cache miss (seq={sequence}, force={force_refresh}): {key}")
        payload = self.client.get_records(key)
        lookups = self.lookups.get_lookups()
        page = RecordPage(
            total=payload.total,
            items=[denormalize_record(raw, lookups) for raw in payload.items],
        )

        with self._lock:
            stale = self._entry is not None and self._entry.sequence > sequence
            if stale:
                logger.info(f"Discarding stale response seq={sequence} (stored seq={self._entry.sequence})")
            else:
                self._entry = CacheEntry(key=key, sequence=sequence, page=page)
        return FetchResult(page, stale=stale)
