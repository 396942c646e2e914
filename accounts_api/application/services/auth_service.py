"""Auth service — credential checks, token issuing and admin seeding."""

from typing import Optional

import structlog

from accounts_api.config import Settings, get_settings
from accounts_api.core.security import create_access_token, hash_password
from accounts_api.domain.models.user import User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.domain.schemas.auth import TokenResponse
from accounts_api.domain.schemas.user import UserRead
from accounts_api.infrastructure.repositories.base_repository import utcnow
from accounts_api.application.services.user_service import (
    get_user_by_credential_name,
    is_valid_password,
)

settings = get_settings()
logger = structlog.get_logger(__name__)

DEFAULT_ADMIN_PASSWORD = Settings.model_fields["ADMIN_PASSWORD"].default


async def authenticate_user(repo: UserRepository, username: str, password: str) -> Optional[User]:
    user = await get_user_by_credential_name(repo, username)
    if not user or not is_valid_password(password, user.password):
        return None
    return user


def build_token_response(user: User) -> TokenResponse:
    access_token = create_access_token(data={"sub": user.email, "uid": str(user.id)})
    return TokenResponse(access_token=access_token, user=UserRead.from_user(user))


async def ensure_admin_user(repo: UserRepository) -> Optional[User]:
    """Create the configured admin account if it does not exist yet."""
    if settings.ENVIRONMENT == "production" and settings.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Refusing to seed admin with the default password", email=settings.ADMIN_EMAIL)
        return None
    if await repo.email_exists(settings.ADMIN_EMAIL):
        return None

    now = utcnow()
    admin = await repo.create(
        User(
            name="Admin",
            email=settings.ADMIN_EMAIL,
            password=hash_password(settings.ADMIN_PASSWORD),
            role="admin",
            created_at=now,
            updated_at=now,
        )
    )
    logger.info("Default admin user created", email=admin.email)
    return admin
