"""notmuch show: whole threads, part metadata and raw part content."""

from collections.abc import Iterator
from typing import BinaryIO

from muchview.errors import DecodeError

from .client import NotmuchClient


class ShowClient(NotmuchClient):
    """Thread and MIME part retrieval via ``notmuch show``."""

    def show(self, query: str) -> list:
        """Return the decoded thread structure for a query (e.g. "thread:XYZ").

        Uses: notmuch show --format=json --entire-thread=true --include-html <query>

        Raises:
            ExecutionError: If notmuch fails.
            DecodeError: If the output isn't a JSON list.
        """
        args = [
            "show",
            "--format=json",
            "--entire-thread=true",
            "--include-html",
            query,
        ]
        payload = self.run_json(args)
        if not isinstance(payload, list):
            raise DecodeError("notmuch show output is not a list")
        return payload

    def show_part_metadata(self, query: str, part: int) -> dict:
        """Metadata (content-type, filename, ...) of one MIME part.

        Uses: notmuch show --format=json --part=N <query>

        Returns:
            The part object, or an empty dict when notmuch printed nothing.
        """
        args = ["show", "--format=json", f"--part={part}", query]
        metadata = self.run_json(args)
        if metadata == []:
            return {}
        if not isinstance(metadata, dict):
            raise DecodeError("notmuch part metadata is not an object")
        return metadata

    def iter_part(self, query: str, part: int) -> Iterator[bytes]:
        """Yield the decoded content of one MIME part in chunks.

        Uses: notmuch show --format=raw --part=N <query>
        """
        return self.iter_raw(["show", "--format=raw", f"--part={part}", query])

    def stream_part(self, query: str, part: int, sink: BinaryIO) -> int:
        """Copy the content of one MIME part into ``sink``; returns bytes written."""
        return self.stream_raw(["show", "--format=raw", f"--part={part}", query], sink)
