"""Canonical serialization of query descriptors."""

from typing import Mapping
from urllib.parse import urlencode


def canonical_query_key(query: Mapping[str, object]) -> str:
    """
    Serialize a query into a stable, URL-encoded parameter string.

    Parameters are sorted by name so two queries with the same keys and
    values always produce the same key, whatever order they were built in.

    Args:
        query: Parameter name -> value mapping

    Returns:
        URL-encoded query string (e.g. 'filter%5Bdate%5D=2024-01-01&limit=10&page=1')
    """
    items = sorted((str(key), str(value)) for key, value in query.items())
    return urlencode(items)
