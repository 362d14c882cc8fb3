"""User service: profile read/update and the paginated user listing.

All operations assume the caller is already authenticated; the user id comes
from a verified token claim.
"""

import logging

from domain.model.errors import NotFoundError
from domain.model.user import Pagination, User
from port.user_repository import UserRepository
from services.password_service import hash_password
from services.user_validation import (
    check_name,
    check_password,
    check_phone,
    collect,
    raise_if_errors,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Keys accepted by update_profile. Anything else (email included) is dropped.
PROFILE_FIELDS = ('first_name', 'last_name', 'phone', 'password')


def get_profile(repo: UserRepository, user_id: str) -> User:
    """Return the user's own record.

    Raises:
        NotFoundError: the account no longer exists
    """
    user = repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(repo: UserRepository, user_id: str, changes: dict) -> User:
    """Apply a partial profile update.

    ``changes`` holds only the keys the caller actually sent. Names set to
    None are ignored, phone set to None or "" clears it, and an empty or
    None password leaves the stored hash alone. A non-empty password is
    the only thing that triggers re-hashing.

    Raises:
        ValidationError: a supplied field breaks the registration rules
        NotFoundError: the account no longer exists
    """
    provided = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
    ignored = sorted(set(changes) - set(PROFILE_FIELDS))
    if ignored:
        logger.debug("Ignoring non-updatable profile fields", extra={"userId": user_id, "fields": ignored})

    checks = []
    updates: dict = {}

    for key, field, label in (('first_name', 'firstName', 'First name'), ('last_name', 'lastName', 'Last name')):
        value = provided.get(key)
        if value is None:
            continue
        checks.append((field, check_name(value, label)))
        if isinstance(value, str):
            updates[key] = value.strip()

    if 'phone' in provided:
        phone = provided['phone']
        if phone is None or (isinstance(phone, str) and not phone.strip()):
            updates['phone'] = None
        else:
            checks.append(('phone', check_phone(phone)))
            if isinstance(phone, str):
                updates['phone'] = phone.strip()

    password = provided.get('password')
    if password:
        checks.append(('password', check_password(password)))

    raise_if_errors(collect(checks))

    if password:
        updates['password_hash'] = hash_password(password)

    if not updates:
        return get_profile(repo, user_id)

    user = repo.update(user_id, updates)
    if not user:
        raise NotFoundError("User not found")

    logger.info("Profile updated", extra={
        "userId": user_id,
        "fields": sorted(k for k in updates if k != 'password_hash'),
        "passwordChanged": 'password_hash' in updates,
    })
    return user


def coerce_positive_int(value, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on anything else."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def list_users(repo: UserRepository, page=None, limit=None) -> tuple[list[User], Pagination]:
    """Return one page of users, newest first, with pagination info."""
    page_number = coerce_positive_int(page, DEFAULT_PAGE)
    page_size = min(coerce_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)

    skip = (page_number - 1) * page_size
    result = repo.find_many(skip=skip, limit=page_size)

    pagination = Pagination(page=page_number, limit=page_size, total=result.total)
    logger.debug("Listed users", extra={"page": page_number, "limit": page_size, "total": result.total})
    return result.items, pagination
