"""Exception types shared by the notmuch client, the mail models and the
outer surfaces.

Every error carries a ``status_code`` so the web layer can tell client
input errors (4xx) apart from execution failures (5xx).
"""


class MuchviewError(Exception):
    """Base class for all muchview errors."""

    status_code = 500


class ConfigError(MuchviewError):
    """Configuration is missing or unusable."""

    pass


class NotmuchError(MuchviewError):
    """Error from the notmuch command."""

    pass


class ExecutionError(NotmuchError):
    """notmuch could not be started, timed out or exited non-zero."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class DecodeError(NotmuchError):
    """notmuch output was not the JSON shape we expected."""

    pass


class ValidationError(MuchviewError):
    """A query, id or part argument supplied by the caller is invalid."""

    status_code = 400


class NotFoundError(MuchviewError):
    """The lookup succeeded but matched nothing."""

    status_code = 404
