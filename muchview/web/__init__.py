"""Web interface: JSON API for searches and threads, plus attachment downloads."""

from .app import create_app

__all__ = ["create_app"]
