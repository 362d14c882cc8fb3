"""User routes. Every endpoint here requires a valid bearer token.

Endpoints:
- GET /api/users/profile: Current user's profile
- PUT /api/users/profile: Partial update of the current user's profile
- GET /api/users: Paginated list of all users, newest first
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.dependencies import get_user_repo
from api.models import (
    ApiResponse,
    PaginationInfo,
    UpdateProfileRequest,
    UserListData,
    UserResponse,
)
from api.security import get_current_claim
from domain.model.user import TokenClaim
from port.user_repository import UserRepository
from services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(get_current_claim)])


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(
    claim: TokenClaim = Depends(get_current_claim),
    repo: UserRepository = Depends(get_user_repo),
):
    """Get the authenticated user's profile."""
    user = await asyncio.to_thread(user_service.get_profile, repo, claim.user_id)
    return ApiResponse[UserResponse](data=UserResponse.from_domain(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    request: UpdateProfileRequest,
    claim: TokenClaim = Depends(get_current_claim),
    repo: UserRepository = Depends(get_user_repo),
):
    """Update firstName, lastName, phone and/or password. Email cannot change."""
    user = await asyncio.to_thread(
        user_service.update_profile, repo, claim.user_id, request.provided_changes()
    )
    return ApiResponse[UserResponse](
        message="Profile updated successfully",
        data=UserResponse.from_domain(user),
    )


@router.get("", response_model=ApiResponse[UserListData])
async def list_users(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    repo: UserRepository = Depends(get_user_repo),
):
    """List all users. Bad page/limit values fall back to defaults instead of failing."""
    users, pagination = await asyncio.to_thread(user_service.list_users, repo, page, limit)
    return ApiResponse[UserListData](
        data=UserListData(
            users=[UserResponse.from_domain(u) for u in users],
            pagination=PaginationInfo.from_domain(pagination),
        )
    )
