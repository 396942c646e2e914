"""Pydantic schemas for Auth."""

from pydantic import BaseModel

from accounts_api.domain.schemas.user import UserRead


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
