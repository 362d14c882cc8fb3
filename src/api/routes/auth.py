"""Authentication routes (register, login)."""

import asyncio
import logging

from fastapi import APIRouter, Depends, status

from api.dependencies import get_user_repo
from api.models import ApiResponse, AuthData, LoginRequest, RegisterRequest, UserResponse
from port.user_repository import UserRepository
from services import auth_service
from services.auth_service import AuthResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(result: AuthResult, message: str) -> ApiResponse[AuthData]:
    return ApiResponse[AuthData](
        message=message,
        data=AuthData(user=UserResponse.from_domain(result.user), token=result.token),
    )


@router.post("/register", response_model=ApiResponse[AuthData], status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, repo: UserRepository = Depends(get_user_repo)):
    """Register a new user.

    Returns:
        The created user (without password hash) and a JWT token

    Raises:
        ValidationError (400), DuplicateEmailError (409)
    """
    # bcrypt and pymongo both block; keep them off the event loop
    result = await asyncio.to_thread(
        auth_service.register,
        repo,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
        phone=request.phone,
    )
    return _auth_response(result, "User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthData])
async def login(request: LoginRequest, repo: UserRepository = Depends(get_user_repo)):
    """Login user and return JWT token.

    Raises:
        ValidationError (400), InvalidCredentialsError (401)
    """
    result = await asyncio.to_thread(auth_service.login, repo, request.email, request.password)
    return _auth_response(result, "Login successful")
