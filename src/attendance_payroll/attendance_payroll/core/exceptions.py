class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid (bad QR token, datetime or amount)."""


class ConflictError(DomainError):
    """Raised when the operation would duplicate an existing record."""


class NotFoundError(DomainError):
    """Raised when an employee, record, request or holiday does not exist."""


class StateError(DomainError):
    """Raised when the target is not in a state that allows the operation."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class AccountInactiveError(AuthorizationError):
    """Raised when an inactive employee tries to record attendance."""


class AuthenticationError(DomainError):
    """Raised when the request carries no usable employee identity."""
