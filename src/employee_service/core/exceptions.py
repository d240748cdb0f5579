class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when no live record exists for the requested key."""


class DeletedError(DomainError):
    """Raised when the record exists but has been soft-deleted."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class DuplicateError(DomainError):
    """Raised when a uniqueness rule (e.g. live email) would be violated."""


class PhotoTooLargeError(DomainError):
    """Raised when a photo payload exceeds the size limit."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class TokenError(AuthenticationError):
    """Raised when a bearer token is malformed, tampered with or expired."""


class AttendanceConflictError(DomainError):
    """Raised when a check-in/check-out does not fit today's attendance state."""


class CollaboratorError(Exception):
    """Unexpected failure of a repository, signer or hasher, wrapped with context."""


class OperationTimeout(Exception):
    """Raised when an operation's deadline elapses before it completes."""


class ConfigurationError(Exception):
    """Raised at startup when settings are missing or invalid."""
