"""MIME part trees from notmuch show output.

notmuch represents a message body as a list of part objects. A part's
``content`` is either a string (decoded text), absent (binary or omitted
content) or a list of sub-parts (multipart containers)::

    [
      {"id": 1, "content-type": "multipart/alternative", "content": [
        {"id": 2, "content-type": "text/plain", "content": "Hi"},
        {"id": 3, "content-type": "text/html", "content": "<p>Hi</p>"}
      ]},
      {"id": 4, "content-type": "image/png", "filename": "a.png",
       "content-id": "<a@b>"}
    ]

``parse_parts`` turns that into a tree of ``Part`` nodes once; body
selection and attachment collection then walk the tree depth-first.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from muchview.log import get_logger

logger = get_logger(__name__)

# Deeper nesting than this is dropped (no real mailer nests this far)
MAX_PART_DEPTH = 32


@dataclass(frozen=True)
class Part:
    """One node of a message's MIME structure."""

    metadata: dict[str, Any]  # The raw notmuch part object, minus sub-parts
    content_type: str  # Lower-cased, "" when notmuch gave none
    text: str | None  # Decoded text content for leaf parts
    children: tuple["Part", ...] = ()

    @property
    def is_attachment(self) -> bool:
        """Parts with a filename or a content-id are listed as attachments."""
        return bool(self.metadata.get("filename")) or "content-id" in self.metadata

    def walk(self) -> Iterator["Part"]:
        """This part followed by all descendants, depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class BodySelection:
    """The part chosen as a message's displayed body."""

    part: Part
    is_html: bool

    @property
    def content(self) -> str:
        return self.part.text or ""


def parse_parts(raw_parts: Any, depth: int = 0) -> list[Part]:
    """Build Part nodes from a notmuch body list, skipping malformed entries."""
    if not isinstance(raw_parts, list):
        return []

    if depth >= MAX_PART_DEPTH:
        logger.warning("MIME structure nested deeper than %d levels, truncating", depth)
        return []

    parts = []
    for raw in raw_parts:
        if not isinstance(raw, dict):
            logger.debug("Skipping malformed MIME part: %r", raw)
            continue

        content = raw.get("content")
        children: tuple[Part, ...] = ()
        text = None
        if isinstance(content, list):
            children = tuple(parse_parts(content, depth + 1))
        elif isinstance(content, str):
            text = content

        metadata = {key: value for key, value in raw.items() if key != "content"}
        content_type = raw.get("content-type")
        parts.append(
            Part(
                metadata=metadata,
                content_type=content_type.lower() if isinstance(content_type, str) else "",
                text=text,
                children=children,
            )
        )
    return parts


def walk_parts(parts: list[Part]) -> Iterator[Part]:
    """Every part of a body list, depth-first in document order."""
    for part in parts:
        yield from part.walk()


def find_part(parts: list[Part], mime: str) -> Part | None:
    """First part (depth-first) whose content-type starts with ``mime`` and
    that carries text content."""
    for part in walk_parts(parts):
        if part.text is not None and part.content_type.startswith(mime):
            return part
    return None


def select_body(parts: list[Part]) -> BodySelection | None:
    """Pick the body to display: the first HTML part, else the first plain
    text part, else nothing."""
    html_part = find_part(parts, "text/html")
    if html_part is not None:
        return BodySelection(html_part, is_html=True)

    text_part = find_part(parts, "text/plain")
    if text_part is not None:
        return BodySelection(text_part, is_html=False)

    return None
