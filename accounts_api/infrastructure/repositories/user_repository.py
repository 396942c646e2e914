"""
Motor Implementation of User Repository.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel

from accounts_api.core.exceptions import ConflictException
from accounts_api.domain.models.user import Role, User
from accounts_api.domain.repositories.user_repository import UserRepository
from accounts_api.infrastructure.database import ROLES_COLLECTION, USERS_COLLECTION
from accounts_api.infrastructure.repositories.base_repository import MongoRepository

# Secrets never leave the store on list/detail reads
SAFE_PROJECTION = {"password": 0, "refreshToken": 0}

# path -> (collection, projection, model of the referenced document)
POPULATION_TARGETS: Dict[str, Tuple[str, Dict[str, int], Type[BaseModel]]] = {
    "role": (ROLES_COLLECTION, {"name": 1}, Role),
}


def _as_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


class MongoUserRepository(MongoRepository[User], UserRepository):
    """User repository implementation using motor."""

    read_projection = SAFE_PROJECTION

    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__(db, User, USERS_COLLECTION)

    async def create(self, obj_in: User) -> User:
        try:
            return await super().create(obj_in)
        except ConflictException as exc:
            # Lost a race against a concurrent create with the same email
            raise ConflictException(
                f"Email {obj_in.email} already exists",
                details={"email": obj_in.email},
            ) from exc

    async def email_exists(self, email: str) -> bool:
        doc = await self.collection.find_one(self._live({"email": email}), {"_id": 1})
        return doc is not None

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await self.collection.find_one(self._live({"email": email}))
        return User.model_validate(doc) if doc else None

    async def populate(self, users: List[User], paths: Sequence[str]) -> List[User]:
        """Replace reference fields with the referenced document's selected fields.

        Values that are not ObjectIds (free-text roles) are left untouched,
        as are references whose target no longer exists.
        """
        for path in paths:
            collection_name, projection, model = POPULATION_TARGETS[path]
            refs = {
                oid
                for oid in (_as_object_id(getattr(user, path)) for user in users)
                if oid is not None
            }
            if not refs:
                continue

            cursor = self.db[collection_name].find({"_id": {"$in": list(refs)}}, projection)
            targets = {doc["_id"]: doc async for doc in cursor}

            populated = []
            for user in users:
                target = targets.get(_as_object_id(getattr(user, path)))
                if target is not None:
                    user = user.model_copy(update={path: model.model_validate(target)})
                populated.append(user)
            users = populated
        return users
