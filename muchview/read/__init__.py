"""Reading threads and attachments from the notmuch index.

Threads come from ``notmuch show`` JSON and are normalized into Message
trees with sanitized HTML bodies. Attachments are looked up by message id
and part number and streamed straight from notmuch.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO
from urllib.parse import quote

from muchview.errors import NotFoundError, ValidationError
from muchview.log import get_logger
from muchview.notmuch import ShowClient

from .body import BodyConverter
from .models import Attachment, Message

__all__ = [
    "Attachment",
    "AttachmentStream",
    "BodyConverter",
    "Message",
    "open_attachment",
    "read_thread",
    "thread_subject",
]

logger = get_logger(__name__)


def read_thread(client: ShowClient, thread_id: str) -> list[Message]:
    """Load a thread and build its message trees.

    Args:
        client: ShowClient for this request.
        thread_id: notmuch thread id, without the "thread:" prefix.

    Returns:
        Root messages of the thread, each with its replies as children.

    Raises:
        ValidationError: If the thread id is empty.
        NotFoundError: If notmuch returned no usable message.
        ExecutionError: If notmuch fails.
        DecodeError: If notmuch output isn't a thread structure.
    """
    thread_id = (thread_id or "").strip()
    if not thread_id:
        raise ValidationError("Missing thread id")

    # Always a thread: query, never a free-form one
    payload = client.show(f"thread:{thread_id}")

    # notmuch show prints a list of threads; we asked for exactly one.
    # A bare list of [message, replies] pairs is accepted as well.
    entries = payload
    if _is_thread_list(payload):
        entries = payload[0]

    messages = Message.list_from_notmuch_thread(entries, BodyConverter())
    if not messages:
        raise NotFoundError(f"Thread not found: {thread_id}")

    logger.debug("Loaded thread %s with %d root message(s)", thread_id, len(messages))
    return messages


def thread_subject(messages: list[Message]) -> str | None:
    """Subject header of the first message of a thread, if any."""
    if not messages:
        return None

    subject = messages[0].header("Subject")
    return subject if isinstance(subject, str) else None


@dataclass(frozen=True)
class AttachmentStream:
    """An attachment ready to be sent: metadata plus a lazy byte stream."""

    attachment: Attachment
    client: ShowClient
    query: str  # "id:<message-id>"

    def headers(self) -> dict[str, str]:
        """HTTP response headers for this attachment."""
        content_type = _strip_line_breaks(self.attachment.content_type)
        headers = {"Content-Type": content_type}

        filename = self.attachment.filename
        if filename:
            headers["Content-Disposition"] = _content_disposition(filename)
        return headers

    def iter_bytes(self) -> Iterator[bytes]:
        """Raw part content, chunk by chunk."""
        return self.client.iter_part(self.query, self.attachment.part)

    def write_to(self, sink: BinaryIO) -> int:
        """Copy the raw part content into ``sink``; returns bytes written."""
        return self.client.stream_part(self.query, self.attachment.part, sink)


def open_attachment(
    client: ShowClient, message_id: str, part: int | str | None
) -> AttachmentStream:
    """Look up one MIME part of a message for download.

    Args:
        client: ShowClient for this request.
        message_id: Message id, with or without an "id:" prefix.
        part: notmuch part number (int or digit string).

    Raises:
        ValidationError: If the id is empty or the part isn't a
            non-negative integer.
        NotFoundError: If notmuch has no such part.
        ExecutionError: If notmuch fails.
    """
    message_id = (message_id or "").strip().removeprefix("id:")
    if not message_id:
        raise ValidationError("Missing message id")

    part_number = _parse_part(part)

    # Always an id: query so callers can't run arbitrary searches
    query = f"id:{message_id}"

    metadata = client.show_part_metadata(query, part_number)
    if not metadata:
        raise NotFoundError(f"Part {part_number} of {message_id} not found")

    attachment = Attachment.from_notmuch_part(metadata, part_number)
    return AttachmentStream(attachment=attachment, client=client, query=query)


def _is_thread_list(payload: list) -> bool:
    """True for [[[message, replies], ...]], False for [[message, replies], ...]."""
    if not payload or not isinstance(payload[0], list):
        return False
    first_thread = payload[0]
    return not first_thread or isinstance(first_thread[0], list)


def _parse_part(part: int | str | None) -> int:
    if isinstance(part, bool):
        raise ValidationError("Missing or invalid part id")

    if isinstance(part, str):
        part = part.strip()
        if not (part.isascii() and part.isdigit()):
            raise ValidationError("Missing or invalid part id")
        return int(part)

    if isinstance(part, int) and part >= 0:
        return part

    raise ValidationError("Missing or invalid part id")


def _strip_line_breaks(value: str) -> str:
    return value.replace("\r", "").replace("\n", "")


def _content_disposition(filename: str) -> str:
    """``attachment; filename="..."``, plus an RFC 5987 ``filename*`` for
    names that aren't plain ASCII (HTTP headers are latin-1)."""
    if filename.isascii():
        return f'attachment; filename="{filename}"'

    fallback = "".join(char if char.isascii() else "_" for char in filename)
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"
