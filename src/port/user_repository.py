from typing import Protocol
from domain.model.user import User, UserPage


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Implementations must enforce email uniqueness atomically and raise
    DuplicateEmailError from ``create`` on conflict. Emails are passed in
    already normalized.
    """
    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
    ) -> User:
        """Create a new user. Raise DuplicateEmailError if the email is taken."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def update(self, user_id: str, fields: dict) -> User | None:
        """Apply field changes and refresh updated_at. Return None if not found."""
        ...

    def find_many(self, skip: int = 0, limit: int = 10) -> UserPage:
        """List users newest first with the total count."""
        ...
