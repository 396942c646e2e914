"""
Base Repository Interface.
Defines the standard contract for soft-delete aware document access.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, TypeVar

from bson import ObjectId

from accounts_api.domain.schemas.common import UpdateResult

T = TypeVar("T")

SortSpec = Sequence[Tuple[str, int]]


class BaseRepository(Protocol[T]):
    """Interface for generic CRUD operations.

    Reads never return soft-deleted documents.
    """

    async def get_by_id(self, id: ObjectId) -> Optional[T]:
        """Get a single entity by ID."""
        ...

    async def find(
        self,
        filter: Dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[T]:
        """List entities matching a filter, with pagination and ordering."""
        ...

    async def count(self, filter: Dict[str, Any]) -> int:
        """Count entities matching a filter."""
        ...

    async def create(self, obj_in: T) -> T:
        """Create a new entity."""
        ...

    async def update_by_id(self, id: ObjectId, changes: Dict[str, Any]) -> UpdateResult:
        """Apply a partial update to an entity."""
        ...

    async def soft_delete(self, filter: Dict[str, Any], deleted_by: Optional[Dict[str, Any]] = None) -> int:
        """Flag matching entities as deleted. Returns how many changed state."""
        ...
