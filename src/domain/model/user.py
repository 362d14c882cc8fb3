import math
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class User:
    """Domain model representing a user account."""
    id: str
    first_name: str
    last_name: str
    email: str
    created_at: datetime
    updated_at: datetime
    phone: str | None = None
    password_hash: str | None = field(default=None, repr=False)

    def to_public_dict(self) -> dict:
        """Serializable view without the password hash."""
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


@dataclass(frozen=True)
class TokenClaim:
    """Identity carried inside an access token."""
    user_id: str
    email: str


@dataclass
class UserPage:
    """One page of users plus the total count across all pages."""
    items: list[User]
    total: int


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
