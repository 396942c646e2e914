"""User service — create, paginated list, fetch, update and soft-delete of users."""

import math
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId
from pydantic.alias_generators import to_camel

from accounts_api.config import get_settings
from accounts_api.core.exceptions import (
    ConflictException,
    EntityNotFoundException,
    ImmutableFieldException,
    InvalidArgumentException,
)
from accounts_api.core.security import hash_password, verify_password
from accounts_api.domain.models.user import AuditSnapshot, User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.domain.schemas.common import DeleteResult, UpdateResult
from accounts_api.domain.schemas.user import UserCreate, UserUpdate
from accounts_api.infrastructure.repositories.base_repository import utcnow
from accounts_api.application.services.query_translator import parse_query

settings = get_settings()
logger = structlog.get_logger(__name__)

IMMUTABLE_FIELDS = ("email",)


def _parse_id(user_id: str) -> ObjectId:
    if not ObjectId.is_valid(user_id):
        raise InvalidArgumentException("Invalid id", details={"id": user_id})
    return ObjectId(user_id)


def _snapshot(actor: Optional[User]) -> Optional[AuditSnapshot]:
    if actor is None or actor.id is None:
        return None
    return AuditSnapshot(id=actor.id, email=actor.email)


async def create_user(repo: UserRepository, body: UserCreate, actor: Optional[User] = None) -> User:
    """Create a user with a hashed password. Email must not belong to a live user."""
    if await repo.email_exists(body.email):
        logger.warning("Duplicate email rejected", email=body.email)
        raise ConflictException(f"Email {body.email} already exists", details={"email": body.email})

    now = utcnow()
    user = User(
        **body.model_dump(exclude={"password"}),
        password=hash_password(body.password),
        created_by=_snapshot(actor),
        created_at=now,
        updated_at=now,
        is_deleted=False,
    )
    created = await repo.create(user)
    logger.info("User created", user_id=str(created.id), email=created.email)
    return created


async def get_users(
    repo: UserRepository,
    current: int,
    page_size: int,
    query_string: str = "",
) -> Dict[str, Any]:
    """Get one page of live users matching the query string.

    A zero page size falls back to DEFAULT_PAGE_SIZE; larger sizes are
    capped at MAX_PAGE_SIZE.
    """
    directive = parse_query(query_string)

    if current is None or current < 1:
        raise InvalidArgumentException("current must be a positive page number", details={"current": current})
    if page_size is not None and page_size < 0:
        raise InvalidArgumentException("pageSize must not be negative", details={"pageSize": page_size})

    limit = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    offset = (current - 1) * limit

    total = await repo.count(directive.filter)
    users = await repo.find(directive.filter, skip=offset, limit=limit, sort=directive.sort)
    if directive.population:
        users = await repo.populate(users, directive.population)

    return {
        "meta": {
            "current": current,
            "page_size": limit,
            "pages": math.ceil(total / limit),
            "total": total,
        },
        "result": users,
    }


async def get_user(repo: UserRepository, user_id: str) -> User:
    """Get a live user by id, without the password hash."""
    user = await repo.get_by_id(_parse_id(user_id))
    if user is None:
        raise EntityNotFoundException("User not found", details={"id": user_id})
    return user


async def update_user(
    repo: UserRepository,
    user_id: str,
    patch: UserUpdate,
    actor: Optional[User] = None,
) -> UpdateResult:
    """Apply the supplied fields to a user. Returns the raw match/modify counts."""
    oid = _parse_id(user_id)
    changes = patch.model_dump(exclude_unset=True)

    for name in IMMUTABLE_FIELDS:
        if name in changes:
            raise ImmutableFieldException(f"{name.capitalize()} cannot be updated", details={"field": name})

    document = {to_camel(key): value for key, value in changes.items() if value is not None}
    document["updatedAt"] = utcnow()
    snapshot = _snapshot(actor)
    if snapshot is not None:
        document["updatedBy"] = snapshot.model_dump(by_alias=True)

    result = await repo.update_by_id(oid, document)
    logger.info(
        "User updated",
        user_id=user_id,
        fields=sorted(changes),
        matched=result.matched_count,
    )
    return result


async def remove_user(repo: UserRepository, user_id: str, actor: Optional[User] = None) -> DeleteResult:
    """Soft-delete a user. Unknown or malformed ids simply match nothing."""
    target = ObjectId(user_id) if ObjectId.is_valid(user_id) else user_id
    snapshot = _snapshot(actor)
    deleted = await repo.soft_delete(
        {"_id": target},
        deleted_by=snapshot.model_dump(by_alias=True) if snapshot else None,
    )
    logger.info("User soft-deleted", user_id=user_id, deleted=deleted)
    return DeleteResult(deleted=deleted)


async def get_user_by_credential_name(repo: UserRepository, username: str) -> Optional[User]:
    """Look up a live user by email with the role reference expanded to its name."""
    user = await repo.get_by_email(username)
    if user is None:
        return None
    [user] = await repo.populate([user], ["role"])
    return user


def is_valid_password(password: str, hashed: Optional[str]) -> bool:
    return verify_password(password, hashed)
