"""Configuration schema definitions.

Uses TypedDict for type safety without runtime overhead.
These types match the structure of config.toml.
"""

from typing import TypedDict


class NotmuchConfig(TypedDict, total=False):
    """How to invoke notmuch.

    Attributes:
        bin: Binary name (looked up on PATH) or absolute path.
        config: Path to the notmuch config file (passed via --config).
        timeout: Seconds to wait for notmuch before giving up; 0 waits forever.
    """

    bin: str
    config: str
    timeout: int


class WebConfig(TypedDict, total=False):
    """Settings for `muchview serve`.

    Attributes:
        host: Interface to bind to.
        port: TCP port.
        debug: Include stderr and tracebacks in error responses.
        page_size: Default number of threads per search page.
    """

    host: str
    port: int
    debug: bool
    page_size: int


class LoggingConfig(TypedDict, total=False):
    """Logging settings.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ...).
    """

    level: str


class MuchviewConfig(TypedDict, total=False):
    """Root configuration structure."""

    notmuch: NotmuchConfig
    web: WebConfig
    logging: LoggingConfig
