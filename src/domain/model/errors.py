"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API layer maps them to HTTP status codes in one place (api/errors.py).
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class DuplicateEmailError(DuplicateError):
    """A user with this email is already registered."""

    def __init__(self, email: str | None = None):
        self.email = email
        super().__init__("Email already registered")


class ValidationError(DomainError):
    """Input violates a business validation rule.

    Carries field-level details as a list of ``{"field": ..., "message": ...}``.
    """

    def __init__(self, message: str = "Validation failed", errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)


class InvalidCredentialsError(DomainError):
    """Login failed. Deliberately vague about which part was wrong."""

    def __init__(self):
        super().__init__("Invalid email or password")


class UnauthorizedError(DomainError):
    """Caller is not authenticated."""


class InvalidTokenError(UnauthorizedError):
    """Token signature, format or claims are invalid."""


class TokenExpiredError(UnauthorizedError):
    """Token was valid but its expiration has passed."""


class StorageError(DomainError):
    """The backing store failed or is unavailable."""
