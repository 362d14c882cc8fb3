"""Field rules shared by registration, login and profile updates.

Each ``check_*`` returns an error message or None, so callers can collect
every problem in one pass and raise a single ValidationError.
"""

import re

from email_validator import EmailNotValidError, validate_email

from domain.model.errors import ValidationError
from services.password_service import MAX_PASSWORD_BYTES

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PHONE_PATTERN = re.compile(r'[0-9]{10,20}')


def normalize_email(email: str) -> str:
    """Trim and lower-case an email so uniqueness is case-insensitive."""
    return (email or '').strip().lower()


def check_name(value, label: str) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return f"{label} is required"
    if not NAME_MIN_LENGTH <= len(value.strip()) <= NAME_MAX_LENGTH:
        return f"{label} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
    return None


def check_email(value) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Email is required"
    try:
        # Syntax only: reserved names such as .test and .local are fine
        result = validate_email(value.strip(), check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return "Must be a valid email address"
    if '.' not in result.domain:
        return "Must be a valid email address"
    return None


def check_password(value) -> str | None:
    if not isinstance(value, str) or not value:
        return "Password is required"
    if len(value) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
        return f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
    if not (re.search(r'[a-z]', value) and re.search(r'[A-Z]', value) and re.search(r'[0-9]', value)):
        return "Password must contain at least one uppercase letter, one lowercase letter and one number"
    return None


def check_phone(value) -> str | None:
    if not isinstance(value, str) or not PHONE_PATTERN.fullmatch(value.strip()):
        return "Phone must contain between 10 and 20 digits"
    return None


def raise_if_errors(errors: list[dict]) -> None:
    if errors:
        raise ValidationError("Validation failed", errors)


def collect(checks: list[tuple[str, str | None]]) -> list[dict]:
    """Turn ``(field, message-or-None)`` pairs into field errors."""
    return [{'field': field, 'message': message} for field, message in checks if message]
