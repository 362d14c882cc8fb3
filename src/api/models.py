"""Pydantic models for API request/response.

Wire format is camelCase (firstName, createdAt, totalPages); Python code
uses snake_case. Every response uses the same envelope:
``{success, message?, data?, errors?}``.
"""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.model.user import Pagination, User

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── requests ─────────────────────────────────────────────────


class RegisterRequest(CamelModel):
    """Request model for user registration. Field rules live in the service."""
    first_name: str
    last_name: str
    email: str
    password: str
    phone: Optional[str] = None


class LoginRequest(CamelModel):
    """Request model for login."""
    email: str
    password: str


class UpdateProfileRequest(CamelModel):
    """Partial profile update. Unknown keys such as ``email`` are dropped."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None

    def provided_changes(self) -> dict:
        """Only the fields the client actually sent, keyed by snake_case name."""
        return self.model_dump(include=self.model_fields_set)


# ── responses ────────────────────────────────────────────────


class UserResponse(CamelModel):
    """Public view of a user. There is deliberately no password field."""
    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(**user.to_public_dict())


class AuthData(CamelModel):
    user: UserResponse
    token: str


class PaginationInfo(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_domain(cls, pagination: Pagination) -> "PaginationInfo":
        return cls(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            total_pages=pagination.total_pages,
        )


class UserListData(CamelModel):
    users: list[UserResponse]
    pagination: PaginationInfo


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(CamelModel, Generic[T]):
    """Response envelope shared by every endpoint."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: Optional[list[FieldError]] = Field(None, description="Field-level validation errors")
    stack: Optional[str] = Field(None, description="Traceback, development only")
