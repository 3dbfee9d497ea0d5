"""Lazily loaded, memoized reference tables."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Mapping, Optional

from salesgrid.retrieval.client import SalesApiClient
from salesgrid.retrieval.models import Lookups
from salesgrid.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REFERENCE_PATHS = {
    "sellers": "sellers",
    "customers": "customers",
}


class LookupCache:
    """
    Loads every reference table once and serves it from memory afterwards.

    Concurrent first callers share one in-flight load. A failed load is not
    cached: the error reaches every waiting caller and the next call retries.
    """

    def __init__(self, client: SalesApiClient, reference_paths: Optional[Mapping[str, str]] = None):
        self.client = client
        self.reference_paths: Dict[str, str] = dict(reference_paths or DEFAULT_REFERENCE_PATHS)
        self._lookups: Optional[Lookups] = None
        self._inflight: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._lookups is not None

    def _load(self) -> Lookups:
        """Fetch every reference kind concurrently."""
        kinds = list(self.reference_paths)
        logger.info(f"Loading reference data: {', '.join(kinds)}")
        with ThreadPoolExecutor(max_workers=max(1, len(kinds))) as pool:
            futures = {kind: pool.submit(self.client.get_reference, self.reference_paths[kind]) for kind in kinds}
            tables = {kind: future.result() for kind, future in futures.items()}
        logger.info(
            "Loaded reference data: "
            + ", ".join(f"{kind}={len(table)}" for kind, table in tables.items())
        )
        return Lookups(tables=tables)

    def get_lookups(self) -> Lookups:
        """
        Return the reference tables, loading them on first use.

        Returns:
            Lookups with one id -> label table per reference kind

        Raises:
            FetchError: If any reference endpoint fails
        """
        with self._lock:
            if self._lookups is not None:
                return self._lookups
            future = self._inflight
            owner = future is None
            if owner:
                future = Future()
                self._inflight = future

        if not owner:
            logger.debug("Waiting for in-flight reference load")
            return future.result()

        try:
            lookups = self._load()
        except BaseException as e:
            with self._lock:
                self._inflight = None
            future.set_exception(e)
            raise

        with self._lock:
            self._lookups = lookups
            self._inflight = None
        future.set_result(lookups)
        return lookups
