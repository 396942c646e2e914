"""
Motor (MongoDB) implementation of the Base Repository.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from accounts_api.core.exceptions import ConflictException
from accounts_api.domain.repositories.base import BaseRepository, SortSpec
from accounts_api.domain.schemas.common import UpdateResult

ModelType = TypeVar("ModelType", bound=BaseModel)

# Matches documents that were never soft-deleted, including ones without the flag
NOT_DELETED: Dict[str, Any] = {"isDeleted": {"$ne": True}}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MongoRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic soft-delete aware repository for pydantic document models."""

    # Projection applied to list/detail reads; None returns whole documents
    read_projection: Optional[Dict[str, int]] = None

    def __init__(self, db: AsyncIOMotorDatabase, model: Type[ModelType], collection_name: str):
        self.db = db
        self.model = model
        self.collection = db[collection_name]

    def _live(self, filter: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {**(filter or {}), **NOT_DELETED}

    async def get_by_id(self, id: ObjectId) -> Optional[ModelType]:
        doc = await self.collection.find_one(self._live({"_id": id}), self.read_projection)
        return self.model.model_validate(doc) if doc else None

    async def find(
        self,
        filter: Dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[ModelType]:
        cursor = self.collection.find(self._live(filter), self.read_projection)
        if sort:
            cursor = cursor.sort(list(sort))
        cursor = cursor.skip(skip).limit(limit)
        docs = await cursor.to_list(length=None)
        return [self.model.model_validate(doc) for doc in docs]

    async def count(self, filter: Dict[str, Any]) -> int:
        return await self.collection.count_documents(self._live(filter))

    async def create(self, obj_in: Any) -> ModelType:
        if isinstance(obj_in, BaseModel):
            doc = obj_in.model_dump(by_alias=True, exclude_none=True)
        else:
            doc = dict(obj_in)
        doc.setdefault("isDeleted", False)

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise ConflictException(
                "Document already exists",
                details={"key": (exc.details or {}).get("keyValue")},
            ) from exc

        doc["_id"] = result.inserted_id
        return self.model.model_validate(doc)

    async def update_by_id(self, id: ObjectId, changes: Dict[str, Any]) -> UpdateResult:
        result = await self.collection.update_one(self._live({"_id": id}), {"$set": changes})
        return UpdateResult(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def soft_delete(self, filter: Dict[str, Any], deleted_by: Optional[Dict[str, Any]] = None) -> int:
        changes: Dict[str, Any] = {"isDeleted": True, "deletedAt": utcnow()}
        if deleted_by:
            changes["deletedBy"] = deleted_by
        result = await self.collection.update_many(self._live(filter), {"$set": changes})
        return result.modified_count
