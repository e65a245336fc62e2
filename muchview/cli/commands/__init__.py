"""CLI commands module."""

from . import attachment, config, search, serve, thread

__all__ = ["search", "thread", "attachment", "config", "serve"]
