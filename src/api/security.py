"""Access guard for protected routes.

Verifies the bearer token and hands the decoded claim to the route. It does
not look the user up; operations that need the record do that themselves
and report NotFound if it is gone.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from domain.model.errors import UnauthorizedError
from domain.model.user import TokenClaim
from services.token_service import verify_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_claim(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaim:
    """Return the verified token claim or raise UnauthorizedError (401).

    Invalid and expired tokens are reported with the same message.
    """
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Authentication required")

    try:
        return verify_token(credentials.credentials)
    except UnauthorizedError as e:
        logger.debug("Rejected bearer token", extra={"reason": type(e).__name__})
        raise UnauthorizedError("Invalid or expired token") from e
