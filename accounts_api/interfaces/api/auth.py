"""Auth API routes — login, account."""

from fastapi import APIRouter, Depends, status

from accounts_api.application.services.auth_service import authenticate_user, build_token_response
from accounts_api.core.exceptions import UnauthorizedException
from accounts_api.domain.models.user import User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.domain.schemas.auth import LoginRequest, TokenResponse
from accounts_api.domain.schemas.common import ApiResponse
from accounts_api.domain.schemas.user import UserRead
from accounts_api.interfaces.api.deps import get_current_user
from accounts_api.interfaces.deps import get_user_repository

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(body: LoginRequest, repo: UserRepository = Depends(get_user_repository)):
    user = await authenticate_user(repo, body.username, body.password)
    if not user:
        raise UnauthorizedException("Invalid username or password")
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        message="User login",
        data=build_token_response(user),
    )


@router.get("/account", response_model=ApiResponse[UserRead])
async def get_account(user: User = Depends(get_current_user)):
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        message="Get user information",
        data=UserRead.from_user(user),
    )
