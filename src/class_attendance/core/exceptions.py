class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced course, session, student or record is absent."""


class InvalidStateError(DomainError):
    """Raised when a required relationship is missing (e.g. no organization)."""


class ForbiddenError(DomainError):
    """Raised when the caller's role is insufficient for an action."""


class ConflictError(DomainError):
    """Raised when an insert loses a race on a unique key."""


class WriteConflictError(ConflictError):
    """Raised when the database aborts a write transaction on a lock conflict; safe to retry."""
