"""MongoDB connection — one motor client per process."""

from functools import lru_cache

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel

from accounts_api.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

USERS_COLLECTION = "users"
ROLES_COLLECTION = "roles"


@lru_cache
def get_client() -> AsyncIOMotorClient:
    """Lazily build the client; motor connects on first operation."""
    return AsyncIOMotorClient(settings.MONGODB_URL, uuidRepresentation="standard")


def get_database() -> AsyncIOMotorDatabase:
    return get_client()[settings.MONGODB_DB]


async def get_db() -> AsyncIOMotorDatabase:
    """FastAPI dependency that yields the application database."""
    return get_database()


def close_client() -> None:
    if get_client.cache_info().currsize:
        get_client().close()
        get_client.cache_clear()


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the indexes the users collection relies on.

    Email uniqueness only applies to live records, so a soft-deleted
    account does not block re-registration with the same address.
    """
    await db[USERS_COLLECTION].create_indexes(
        [
            IndexModel(
                [("email", ASCENDING)],
                name="email_unique_live",
                unique=True,
                partialFilterExpression={"isDeleted": False},
            ),
            IndexModel([("isDeleted", ASCENDING)], name="is_deleted"),
            IndexModel([("createdAt", ASCENDING)], name="created_at"),
        ]
    )
    logger.info("Database indexes created/verified", collection=USERS_COLLECTION)
