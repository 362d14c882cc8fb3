"""Auth service: registration and authentication business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API layer maps to HTTP status codes.
"""

import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache

from domain.model.errors import DuplicateEmailError, InvalidCredentialsError
from domain.model.user import TokenClaim, User
from port.user_repository import UserRepository
from services.password_service import hash_password, verify_password
from services.token_service import issue_token
from services.user_validation import (
    check_email,
    check_name,
    check_password,
    check_phone,
    collect,
    normalize_email,
    raise_if_errors,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Authenticated user plus the access token issued for them."""
    user: User
    token: str


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def _issue_for(user: User) -> str:
    return issue_token(TokenClaim(user_id=user.id, email=user.email))


def register(
    repo: UserRepository,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    phone: str | None = None,
) -> AuthResult:
    """Register a new user and issue a token.

    An empty phone is treated as not provided.

    Raises:
        ValidationError: one or more fields break the registration rules
        DuplicateEmailError: email already registered
    """
    if isinstance(phone, str) and not phone.strip():
        phone = None

    raise_if_errors(collect([
        ('firstName', check_name(first_name, 'First name')),
        ('lastName', check_name(last_name, 'Last name')),
        ('email', check_email(email)),
        ('password', check_password(password)),
        ('phone', check_phone(phone) if phone is not None else None),
    ]))

    normalized_email = normalize_email(email)

    # Fast path only. The store's unique constraint is the real guard.
    if repo.get_by_email(normalized_email):
        raise DuplicateEmailError(normalized_email)

    user = repo.create(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=normalized_email,
        password_hash=hash_password(password),
        phone=phone.strip() if phone else None,
    )

    logger.info("User registered", extra={"userId": user.id, "email": user.email})
    return AuthResult(user=user, token=_issue_for(user))


def login(repo: UserRepository, email: str, password: str) -> AuthResult:
    """Authenticate by email and password and issue a token.

    Unknown email and wrong password raise the same error.

    Raises:
        ValidationError: email malformed or password missing
        InvalidCredentialsError: credentials do not match an account
    """
    raise_if_errors(collect([
        ('email', check_email(email)),
        ('password', None if isinstance(password, str) and password else "Password is required"),
    ]))

    user = repo.get_by_email(normalize_email(email))
    if not user:
        # Spend the same bcrypt work as a real check so timing does not leak the email
        verify_password(password, _dummy_hash())
        logger.info("Login rejected", extra={"email": normalize_email(email)})
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        logger.info("Login rejected", extra={"email": normalize_email(email)})
        raise InvalidCredentialsError()

    logger.info("User logged in", extra={"userId": user.id, "email": user.email})
    return AuthResult(user=user, token=_issue_for(user))
