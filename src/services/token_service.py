"""Access token issuance and verification (HS256 JWT).

The signing key comes from JWT_SECRET_KEY. Outside development and test
environments a missing key is fatal at import time, so the app refuses to
start instead of signing tokens with a guessable secret.
"""

import logging
import os
import re
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from domain.model.errors import InvalidTokenError, TokenExpiredError
from domain.model.user import TokenClaim

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_IN = "7d"
INSECURE_ENVIRONMENTS = {"development", "test"}

_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_expires_in(value: str) -> timedelta:
    """Parse an expiration window such as ``7d``, ``12h``, ``30m`` or ``3600``."""
    match = re.fullmatch(r"\s*(\d+)\s*([smhd]?)\s*", value or "")
    if not match:
        raise ValueError(f"Invalid JWT_EXPIRES_IN value: {value!r}")
    amount, unit = int(match.group(1)), match.group(2) or "s"
    if amount <= 0:
        raise ValueError(f"JWT_EXPIRES_IN must be positive: {value!r}")
    return timedelta(**{_DURATION_UNITS[unit]: amount})


def load_secret_key(secret: str | None, environment: str) -> str:
    """Return the signing key, or fail when it is missing outside development."""
    if secret:
        return secret
    if environment in INSECURE_ENVIRONMENTS:
        logger.warning(
            "JWT_SECRET_KEY not set; using a random per-process key. "
            "Tokens will not survive a restart.",
            extra={"environment": environment},
        )
        return secrets.token_hex(32)
    raise ValueError(
        "JWT_SECRET_KEY environment variable is required. "
        "Generate a secure key with: openssl rand -hex 32"
    )


ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
JWT_SECRET_KEY = load_secret_key(os.getenv("JWT_SECRET_KEY"), ENVIRONMENT)
JWT_EXPIRES_IN = parse_expires_in(os.getenv("JWT_EXPIRES_IN", DEFAULT_EXPIRES_IN))


def issue_token(
    claim: TokenClaim,
    secret_key: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token carrying the user's id and email."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": claim.user_id,
        "userId": claim.user_id,
        "email": claim.email,
        "iat": now,
        "exp": now + (expires_delta if expires_delta is not None else JWT_EXPIRES_IN),
    }
    return jwt.encode(payload, secret_key or JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret_key: str | None = None) -> TokenClaim:
    """Decode and verify a token.

    Raises:
        TokenExpiredError: signature is valid but the token has expired
        InvalidTokenError: bad signature, malformed token or missing claims
    """
    try:
        payload = jwt.decode(token, secret_key or JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        logger.debug(f"JWT expired: {e}")
        raise TokenExpiredError("Token has expired") from e
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        raise InvalidTokenError("Invalid token") from e

    user_id = payload.get("userId") or payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidTokenError("Token is missing identity claims")
    return TokenClaim(user_id=user_id, email=email)
