"""Error taxonomy for the dream store.

User-input errors (``ValidationError``, ``NotFoundError``,
``AlreadyRewrittenError``) are raised synchronously to the caller.
``RewriteFailed`` and ``PersistenceWarning`` are recoverable conditions that
the store delivers to observers instead of raising across the async boundary.
"""

from pathlib import Path
from uuid import UUID


class DreamStoreError(Exception):
    """Base class for dream store errors."""
    pass


class ValidationError(DreamStoreError):
    """Bad input, such as empty dream text or an unknown tone."""
    pass


class NotFoundError(DreamStoreError):
    """No dream with the given id exists in the store."""

    def __init__(self, dream_id: UUID):
        self.dream_id = dream_id
        super().__init__(f"Dream {dream_id} not found")


class InvariantViolation(DreamStoreError):
    """Rewritten text and tone must be set together or not at all."""
    pass


class AlreadyRewrittenError(DreamStoreError):
    """The dream already carries a rewrite."""

    def __init__(self, dream_id: UUID, message: str | None = None):
        self.dream_id = dream_id
        super().__init__(message or f"Dream {dream_id} has already been rewritten")


class RewriteInProgressError(AlreadyRewrittenError):
    """A rewrite for the dream is already in flight."""

    def __init__(self, dream_id: UUID):
        super().__init__(dream_id, f"A rewrite for dream {dream_id} is already in progress")


class RewriteFailed(DreamStoreError):
    """The rewrite service failed or timed out. The user may retry."""

    def __init__(self, dream_id: UUID, tone: str, reason: str):
        self.dream_id = dream_id
        self.tone = tone
        self.reason = reason
        super().__init__(f"Rewrite of dream {dream_id} ({tone}) failed: {reason}")


class PersistenceWarning(DreamStoreError):
    """Loading or saving the dream collection failed; the store kept going."""

    def __init__(self, path: Path | str | None, reason: str):
        self.path = path
        self.reason = reason
        where = f" ({path})" if path else ""
        super().__init__(f"Dream storage{where}: {reason}")


class RewriteServiceError(DreamStoreError):
    """Raised by rewrite service implementations."""
    pass


class UnauthorizedError(RewriteServiceError):
    """The service rejected the credentials."""
    pass


class RateLimitedError(RewriteServiceError):
    """The service asked the client to slow down."""
    pass


class ServiceResponseError(RewriteServiceError):
    """The service answered with an unexpected status or body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ServiceTransportError(RewriteServiceError):
    """The request never got a response."""
    pass


class EmptyRewriteError(RewriteServiceError):
    """The service returned no rewritten text."""
    pass
