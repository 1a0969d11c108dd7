class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing or malformed."""


class SignatureError(DomainError):
    """Raised when a token signature does not match or the token is not live."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a student, schedule, enrollment or override does not exist."""


class EligibilityError(DomainError):
    """Raised when a student may not be recorded against a schedule occurrence."""


class StateConflictError(DomainError):
    """Raised when an operation conflicts with existing state."""

    def __init__(self, message: str, *, conflicts=None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class InternalError(DomainError):
    """Raised when the storage layer fails unexpectedly."""


class DuplicateRecordError(Exception):
    """Raised by repositories when a unique constraint rejects an insert."""
