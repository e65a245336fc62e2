"""muchview - browse a notmuch mail index from the browser or the terminal."""

__version__ = "0.1.0"
