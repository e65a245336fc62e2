"""Data models for search results."""

from dataclasses import dataclass, field
from typing import Any

NO_SUBJECT = "[No Subject]"


@dataclass(frozen=True)
class SearchResult:
    """One thread row from a notmuch search.

    Built once from the JSON row and never modified afterwards.
    """

    id: str  # notmuch thread id (without the "thread:" prefix)
    subject: str = NO_SUBJECT
    authors: str | None = None  # "Alice, Bob| Carol" as formatted by notmuch
    tags: tuple[str, ...] = ()
    timestamp: int = 0  # Unix seconds of the newest message
    date_relative: str = ""  # e.g. "Yest. 14:02"
    total: int = 0  # Messages in the thread
    matched: int = 0  # Messages matching the query
    matches: tuple[str, ...] = field(default=("",))  # Matched message ids

    @classmethod
    def from_notmuch(cls, row: dict[str, Any]) -> "SearchResult":
        """Build a SearchResult from a notmuch search row.

        ``matches`` comes from the first entry of the row's ``query`` list,
        a space separated list of ``id:<message-id>`` terms. An absent or
        empty query yields ``("",)``, not an empty tuple.
        """
        subject = row.get("subject")
        if not isinstance(subject, str):
            subject = NO_SUBJECT

        authors = row.get("authors")
        if authors is not None:
            authors = str(authors)

        tags = row.get("tags")
        tags = tuple(str(tag) for tag in tags) if isinstance(tags, list) else ()

        date_relative = row.get("date_relative")

        return cls(
            id=str(row.get("thread") or ""),
            subject=subject,
            authors=authors,
            tags=tags,
            timestamp=_to_int(row.get("timestamp")),
            date_relative=str(date_relative) if date_relative is not None else "",
            total=_to_int(row.get("total")),
            matched=_to_int(row.get("matched")),
            matches=_parse_matches(row.get("query")),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "subject": self.subject,
            "authors": self.authors,
            "tags": list(self.tags),
            "timestamp": self.timestamp,
            "date_relative": self.date_relative,
            "total": self.total,
            "matched": self.matched,
            "matches": list(self.matches),
        }


def _parse_matches(query: Any) -> tuple[str, ...]:
    first = ""
    if isinstance(query, list) and query and isinstance(query[0], str):
        first = query[0]
    elif isinstance(query, str):
        first = query

    return tuple(token.removeprefix("id:") for token in first.split(" "))


def _to_int(value: Any) -> int:
    """Coerce ints and numeric strings; anything else (booleans too) becomes 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0
