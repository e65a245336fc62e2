"""Subprocess wrapper around the notmuch command-line tool.

Every command is executed as an argument vector (never through a shell),
with the configured ``--config`` file prepended. Stdin is closed, stdout
and stderr are fully drained before waiting on the process, and raw part
content is copied to the caller in chunks instead of being buffered.
"""

import json
import shlex
import subprocess
import tempfile
from collections.abc import Iterator, Sequence
from typing import Any, BinaryIO

from muchview.config import NotmuchSettings
from muchview.errors import DecodeError, ExecutionError
from muchview.log import get_logger

logger = get_logger(__name__)

# Read size for raw part streaming
CHUNK_SIZE = 64 * 1024


class NotmuchClient:
    """Run notmuch commands and decode their output.

    Instances hold no state besides the invocation settings; create one per
    request.

    Example:
        client = NotmuchClient("/usr/bin/notmuch", "/home/me/.notmuch-config")
        rows = client.run_json(["search", "--format=json", "tag:inbox"])
    """

    def __init__(self, binary: str, config_path: str, timeout: float | None = None):
        """Initialize the client.

        Args:
            binary: Path to the notmuch executable.
            config_path: notmuch config file passed as ``--config``.
            timeout: Seconds to wait for the process to exit; None waits forever.
        """
        self._binary = binary
        self._config_path = config_path
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: NotmuchSettings):
        """Create a client from resolved configuration."""
        return cls(settings.binary, settings.config_path, settings.timeout)

    def command(self, args: Sequence[str]) -> list[str]:
        """Full argument vector for a notmuch sub-command."""
        return [self._binary, "--config", self._config_path, *args]

    def run(self, args: Sequence[str]) -> str:
        """Run a notmuch command and return its stdout.

        Raises:
            ExecutionError: If notmuch can't be started, times out or exits
                non-zero.
        """
        cmd = self.command(args)
        logger.debug("Running %s", shlex.join(cmd))

        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"notmuch command timed out after {self._timeout}s",
                stderr=_decode(e.stderr).strip(),
            ) from e
        except OSError as e:
            raise ExecutionError(f"Unable to execute notmuch ({cmd[0]}): {e}") from e

        _check_exit(cmd, result.returncode, _decode(result.stderr))
        return _decode(result.stdout)

    def run_json(self, args: Sequence[str]) -> Any:
        """Run a JSON-producing notmuch command and decode the result.

        Blank output decodes to an empty list.

        Raises:
            ExecutionError: See ``run``.
            DecodeError: If stdout is not valid JSON.
        """
        output = self.run(args)

        if not output.strip():
            return []

        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Failed to parse notmuch output: {e}") from e

    def iter_raw(self, args: Sequence[str], chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Yield the raw stdout of a notmuch command chunk by chunk.

        Stderr goes to an anonymous temporary file so a chatty process
        can't block on a full pipe while we copy stdout. The exit status is
        checked after the last chunk; closing the iterator early kills the
        process.

        Raises:
            ExecutionError: See ``run``. Raised lazily, while iterating.
        """
        cmd = self.command(args)
        logger.debug("Streaming %s", shlex.join(cmd))

        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except OSError as e:
                raise ExecutionError(
                    f"Unable to execute notmuch ({cmd[0]}): {e}"
                ) from e

            try:
                for chunk in iter(lambda: process.stdout.read(chunk_size), b""):
                    yield chunk
            except BaseException:
                # Consumer went away (or failed) mid-stream
                process.kill()
                process.wait()
                raise
            finally:
                process.stdout.close()

            try:
                exit_code = process.wait(timeout=self._timeout)
            except subprocess.TimeoutExpired as e:
                process.kill()
                process.wait()
                raise ExecutionError(
                    f"notmuch command timed out after {self._timeout}s"
                ) from e

            stderr_file.seek(0)
            _check_exit(cmd, exit_code, _decode(stderr_file.read()))

    def stream_raw(self, args: Sequence[str], sink: BinaryIO) -> int:
        """Copy the raw stdout of a notmuch command into ``sink``.

        Returns:
            Number of bytes written.
        """
        written = 0
        for chunk in self.iter_raw(args):
            sink.write(chunk)
            written += len(chunk)
        if hasattr(sink, "flush"):
            sink.flush()
        return written


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _check_exit(cmd: list[str], exit_code: int, stderr: str) -> None:
    """Raise ExecutionError for a non-zero exit code."""
    if exit_code == 0:
        return

    error_output = stderr.strip()
    logger.warning(
        "notmuch exited with %s (%s): %s", exit_code, shlex.join(cmd), error_output
    )
    raise ExecutionError(
        f"notmuch command failed with exit code {exit_code}",
        exit_code=exit_code,
        stderr=error_output,
    )
