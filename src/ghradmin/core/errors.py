"""Error types raised by the release administration engine."""


class ReleaseAdminError(Exception):
    """Base class for all ghr-admin errors."""

    pass


class InvalidArgument(ReleaseAdminError, ValueError):
    """A tag, release id, pattern or URL was rejected before any request."""

    pass


class InvalidEndpoint(InvalidArgument):
    """An endpoint tried to leave the configured API base URL."""

    pass


class InvalidConfiguration(InvalidArgument):
    """An environment-derived setting is malformed."""

    pass


class InvalidPattern(InvalidArgument):
    """A regular expression could not be compiled."""

    pass


class NotFound(ReleaseAdminError):
    """The requested resource is absent or was filtered out."""

    pass


class TransportError(ReleaseAdminError):
    """The API answered with an unexpected status or could not be reached."""

    def __init__(self, message: str, status_code: int = 0, dump: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.dump = dump


class PartialFailure(ReleaseAdminError):
    """A multi-item workflow failed after applying some of its effects."""

    def __init__(self, message: str, completed: list, cause: Exception):
        super().__init__(message)
        self.completed = completed
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.args[0]}: {self.cause}"


class Cancelled(ReleaseAdminError):
    """The operation was aborted through the cancellation token."""

    pass
