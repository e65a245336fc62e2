"""Thread search against the local notmuch index."""

from muchview.errors import ValidationError
from muchview.log import get_logger
from muchview.notmuch import SearchClient

from .models import SearchResult

__all__ = ["SearchResult", "search_threads"]

logger = get_logger(__name__)


def search_threads(
    client: SearchClient,
    query: str,
    limit: int = 50,
    offset: int = 0,
) -> list[SearchResult]:
    """Search threads and normalize the rows.

    Args:
        client: SearchClient for this request.
        query: notmuch query string (e.g., "from:alice@example.com").
        limit: Maximum number of threads to return.
        offset: Number of threads to skip (for paging).

    Returns:
        SearchResult objects in notmuch's order (newest first).

    Raises:
        ValidationError: If the query is empty or limit/offset are negative.
        ExecutionError: If notmuch fails.
        DecodeError: If notmuch output can't be decoded.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Missing search query")
    if limit < 0 or offset < 0:
        raise ValidationError("limit and offset must not be negative")

    rows = client.search(query, limit=limit, offset=offset)

    results = []
    for row in rows:
        if not isinstance(row, dict):
            logger.debug("Skipping malformed search row: %r", row)
            continue
        results.append(SearchResult.from_notmuch(row))
    return results
