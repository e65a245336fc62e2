"""Data models for threads read from notmuch."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from muchview.errors import DecodeError
from muchview.log import get_logger

from .body import BodyConverter
from .parts import Part, parse_parts, select_body, walk_parts

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_DISPOSITION = "attachment"

# Replies nested deeper than this are dropped
MAX_THREAD_DEPTH = 200


@dataclass(frozen=True)
class Attachment:
    """Metadata of one MIME part that carries a filename or a content-id."""

    filename: str  # "" when unknown; never contains quotes or line breaks
    content_type: str = DEFAULT_CONTENT_TYPE
    disposition: str = DEFAULT_DISPOSITION
    content_id: str | None = None  # Raw, e.g. "<image001@example.com>"
    part: int | None = None  # notmuch part number, for --part=N

    @classmethod
    def from_notmuch_part(
        cls, metadata: Mapping[str, Any], part: int | None = None
    ) -> "Attachment":
        """Build an Attachment from part metadata returned by notmuch.

        Args:
            metadata: A notmuch part object (content-type, filename, ...).
            part: Part number, when the caller already knows it. Otherwise
                the part's own ``id`` is used.
        """
        filename = metadata.get("filename") or ""
        # The filename ends up in a Content-Disposition header
        filename = str(filename).replace('"', "").replace("\r", "").replace("\n", "")

        content_type = metadata.get("content-type") or DEFAULT_CONTENT_TYPE
        disposition = metadata.get("content-disposition") or DEFAULT_DISPOSITION

        content_id = metadata.get("content-id")
        if content_id is not None:
            content_id = str(content_id)

        if part is None:
            part = _part_number(metadata.get("id"))

        return cls(
            filename=filename,
            content_type=str(content_type),
            disposition=str(disposition),
            content_id=content_id,
            part=part,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "filename": self.filename,
            "content_type": self.content_type,
            "disposition": self.disposition,
            "content_id": self.content_id,
            "part": self.part,
        }


@dataclass(frozen=True)
class Message:
    """One message of a thread, with its replies.

    Built bottom-up from notmuch show output by ``from_notmuch_entry`` and
    never modified afterwards. ``body`` is sanitized HTML, ready to embed.
    """

    id: str
    headers: Mapping[str, str]
    tags: tuple[str, ...]
    timestamp: int
    date_relative: str
    body: str | None
    body_is_html: bool
    attachments: tuple[Attachment, ...]
    children: tuple["Message", ...]

    @classmethod
    def from_notmuch_entry(
        cls, entry: Any, converter: BodyConverter | None = None, depth: int = 0
    ) -> "Message | None":
        """Build a Message tree from one ``[message, replies]`` entry.

        Returns None (instead of raising) when the entry is malformed, so
        one bad message never takes down the rest of the thread.

        Args:
            entry: ``[message_object, [child_entry, ...]]`` from notmuch.
            converter: BodyConverter to use; a fresh one by default.
            depth: Nesting level of this entry, used to bound recursion.
        """
        if not isinstance(entry, (list, tuple)) or not entry:
            return None

        message = entry[0]
        if not isinstance(message, dict):
            return None

        if converter is None:
            converter = BodyConverter()

        child_entries = entry[1] if len(entry) > 1 else []
        if not isinstance(child_entries, list):
            child_entries = []

        if child_entries and depth + 1 >= MAX_THREAD_DEPTH:
            logger.warning(
                "Thread nested deeper than %d levels, dropping replies of %s",
                MAX_THREAD_DEPTH,
                message.get("id"),
            )
            child_entries = []

        children = []
        for child_entry in child_entries:
            child = cls.from_notmuch_entry(child_entry, converter, depth + 1)
            if child is None:
                logger.debug("Skipping malformed reply entry: %r", child_entry)
                continue
            children.append(child)

        return cls._from_message_object(message, tuple(children), converter)

    @classmethod
    def list_from_notmuch_thread(
        cls, entries: Any, converter: BodyConverter | None = None
    ) -> list["Message"]:
        """Build the root messages of a thread, skipping malformed entries.

        Raises:
            DecodeError: If ``entries`` isn't a list at all.
        """
        if not isinstance(entries, list):
            raise DecodeError("notmuch thread is not a list of messages")

        if converter is None:
            converter = BodyConverter()

        messages = []
        for entry in entries:
            message = cls.from_notmuch_entry(entry, converter)
            if message is None:
                logger.debug("Skipping malformed thread entry: %r", entry)
                continue
            messages.append(message)
        return messages

    @classmethod
    def _from_message_object(
        cls, message: dict, children: tuple["Message", ...], converter: BodyConverter
    ) -> "Message":
        message_id = str(message.get("id") or "")

        headers = message.get("headers")
        headers = dict(headers) if isinstance(headers, dict) else {}

        tags = message.get("tags")
        tags = tuple(str(tag) for tag in tags) if isinstance(tags, list) else ()

        parts = parse_parts(message.get("body"))
        selection = select_body(parts)

        attachments = tuple(
            collect_attachments(parts, exclude=selection.part if selection else None)
        )

        body = None
        if selection is not None and selection.is_html:
            body = converter.convert_html(selection.content, message_id, attachments)
        elif selection is not None:
            body = converter.convert_text(selection.content)

        date_relative = message.get("date_relative")

        return cls(
            id=message_id,
            headers=MappingProxyType(headers),
            tags=tags,
            timestamp=_timestamp(message.get("timestamp")),
            date_relative=str(date_relative) if date_relative is not None else "",
            body=body,
            body_is_html=selection is not None and selection.is_html,
            attachments=attachments,
            children=children,
        )

    @property
    def display_date(self) -> str | int:
        """The relative date when notmuch gave one, else the raw timestamp."""
        return self.date_relative or self.timestamp

    def header(self, name: str, default: str | None = None) -> str | None:
        """Look up a header case-insensitively."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def walk(self) -> Iterator["Message"]:
        """This message followed by all replies, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "headers": dict(self.headers),
            "tags": list(self.tags),
            "timestamp": self.timestamp,
            "date_relative": self.date_relative,
            "body": self.body,
            "body_is_html": self.body_is_html,
            "attachments": [attachment.to_dict() for attachment in self.attachments],
            "children": [child.to_dict() for child in self.children],
        }


def _part_number(value: Any) -> int | None:
    """notmuch part ids are ints; accept digit strings too."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        return int(value.strip())
    return None


def _timestamp(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def collect_attachments(
    parts: list[Part], exclude: Part | None = None
) -> list[Attachment]:
    """Attachments of a body, depth-first in document order.

    Every part with a filename or a content-id counts, including parts
    nested in multipart containers. ``exclude`` is the part shown as the
    message body.
    """
    return [
        Attachment.from_notmuch_part(part.metadata)
        for part in walk_parts(parts)
        if part.is_attachment and part is not exclude
    ]
