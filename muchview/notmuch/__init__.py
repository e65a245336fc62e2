"""notmuch command-line wrapper.

We call the notmuch binary through subprocess instead of the Python
bindings: it keeps installation simple and the JSON output format is
stable enough to normalize ourselves.
"""

from muchview.errors import DecodeError, ExecutionError, NotmuchError

from .client import NotmuchClient
from .search import SearchClient
from .show import ShowClient

__all__ = [
    "NotmuchClient",
    "SearchClient",
    "ShowClient",
    "NotmuchError",
    "ExecutionError",
    "DecodeError",
]
