"""notmuch search."""

from muchview.errors import DecodeError

from .client import NotmuchClient


class SearchClient(NotmuchClient):
    """Thread search via ``notmuch search``."""

    def search(self, query: str, limit: int = 50, offset: int = 0) -> list:
        """Run a notmuch search and return the decoded thread rows.

        Uses: notmuch search --format=json --limit=N --offset=M <query>

        Args:
            query: notmuch search expression (e.g. "tag:inbox").
            limit: Maximum number of threads.
            offset: Number of threads to skip.

        Raises:
            ExecutionError: If notmuch fails.
            DecodeError: If the output isn't a JSON list.
        """
        args = [
            "search",
            "--format=json",
            f"--limit={limit}",
            f"--offset={offset}",
            query,
        ]
        rows = self.run_json(args)
        if not isinstance(rows, list):
            raise DecodeError("notmuch search output is not a list")
        return rows
