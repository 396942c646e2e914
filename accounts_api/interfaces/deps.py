"""
API Dependencies.
"""

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from accounts_api.infrastructure.database import get_db
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.infrastructure.repositories.user_repository import MongoUserRepository


def get_user_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return MongoUserRepository(db)
