"""Error taxonomy for the worklog engine.

Every failure the engine can report is one of the classes below. Callers
catch ``WorklogError`` to handle all of them, or a specific subclass to
decide whether to show a retry hint.
"""

from __future__ import annotations


class WorklogError(Exception):
    """Base class for all worklog engine errors."""


class ValidationError(WorklogError):
    """Input was rejected before any state changed."""


class EmptyBatch(ValidationError):
    """An entry batch had no non-empty lines after trimming."""


class OversizedBatch(ValidationError):
    """An entry batch had more entries than one submission allows."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"Too many entries in one submission: {count} (at most {limit})"
        )


class InvalidRange(ValidationError):
    """A report window ended before it started, or a date was unparseable."""


class InvalidFormat(ValidationError):
    """A credential candidate did not match the required key format."""


class InvalidStyle(ValidationError):
    """A report style outside the supported set was requested."""


class NoEntriesInRange(ValidationError):
    """The document has nothing dated inside the requested window."""


class MissingCredential(WorklogError):
    """No API key is configured."""

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message or "API key not found. Save one with `worklog key set`."
        )


class NoPriorVersion(WorklogError):
    """Undo was requested but there is no backup to restore."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or "No previous version to restore.")


class StorageError(WorklogError):
    """Reading or writing the document (or its backup) failed."""


class GatewayError(WorklogError):
    """The language model service call failed."""

    retryable = False


class Unauthorized(GatewayError):
    """The service rejected the credential."""


class RateLimited(GatewayError):
    """The service asked us to slow down."""

    retryable = True

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class NetworkError(GatewayError):
    """The service could not be reached or did not answer in time."""

    retryable = True


class ProviderError(GatewayError):
    """The service answered with an error or an unusable response."""

    def __init__(self, message: str, status: int = 0, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(message)
