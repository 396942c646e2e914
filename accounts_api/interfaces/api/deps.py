"""FastAPI dependency — JWT auth for the acting user."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts_api.core.exceptions import UnauthorizedException
from accounts_api.core.security import decode_access_token
from accounts_api.domain.models.user import User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.interfaces.deps import get_user_repository

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repo: UserRepository = Depends(get_user_repository),
) -> User:
    """Extract and validate the current user from JWT token."""
    if credentials is None:
        raise UnauthorizedException("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid or expired token")

    email: Optional[str] = payload.get("sub")
    if email is None:
        raise UnauthorizedException("Invalid token")

    user = await repo.get_by_email(email)
    if user is None:
        raise UnauthorizedException("User not found or deleted")

    return user
