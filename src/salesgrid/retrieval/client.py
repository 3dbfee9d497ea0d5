"""HTTP client for the sales dataset endpoints."""

import time
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from salesgrid.retrieval.models import RecordsPayload, parse_reference_table
from salesgrid.utils.logging import get_logger

logger = get_logger(__name__)


class FetchError(RuntimeError):
    """A remote call failed: network error, non-success status or bad payload."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SalesApiClient:
    """Thin transport over the records and reference endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 20,
        user_agent: str = "salesgrid/0.1",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Dict[str, Any], session: Optional[requests.Session] = None) -> "SalesApiClient":
        api = config.get("api", {})
        return cls(
            api["base_url"],
            timeout=api.get("timeout_seconds", 20),
            user_agent=api.get("user_agent", "salesgrid/0.1"),
            session=session,
        )

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    def _get_json(self, path: str, query_string: str = "") -> Any:
        """
        GET a path under the base URL and decode the JSON body.

        Raises:
            FetchError: On network errors, non-success status or invalid JSON
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        if query_string:
            url = f"{url}?{query_string}"

        start_time = time.monotonic()
        try:
            response = self.session.get(url, headers=self._get_headers(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as req_e:
            status_code = None
            if getattr(req_e, "response", None) is not None:
                status_code = req_e.response.status_code
            logger.error(f"Request to {url} failed: {req_e}")
            raise FetchError(f"Failed to fetch {url}: {req_e}", url=url, status_code=status_code) from req_e

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from {url}: {e}", url=url, status_code=response.status_code) from e

        logger.debug(f"GET {url} -> {response.status_code} in {time.monotonic() - start_time:.3f}s")
        return data

    def get_records(self, query_string: str) -> RecordsPayload:
        """
        Fetch one page of raw records.

        Args:
            query_string: Already-encoded query parameters

        Returns:
            RecordsPayload with the total count and raw items
        """
        data = self._get_json("records", query_string)
        try:
            return RecordsPayload.model_validate(data)
        except ValidationError as e:
            raise FetchError(f"Unexpected records payload: {e}", url=f"{self.base_url}/records") from e

    def get_reference(self, path: str) -> Dict[str, str]:
        """Fetch a reference endpoint and build its id -> label table."""
        data = self._get_json(path)
        try:
            return parse_reference_table(data)
        except ValueError as e:
            raise FetchError(f"Unexpected reference payload from {path}: {e}", url=f"{self.base_url}/{path}") from e
