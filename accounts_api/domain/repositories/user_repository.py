"""
User Repository Interface.
Defines specific data access operations for Users.
"""

from typing import List, Optional, Sequence

from accounts_api.domain.repositories.base import BaseRepository
from accounts_api.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    async def email_exists(self, email: str) -> bool:
        """Whether a live (not soft-deleted) user already uses this email."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a live user by email, including the password hash."""
        ...

    async def populate(self, users: List[User], paths: Sequence[str]) -> List[User]:
        """Expand reference fields (e.g. role) into their referenced documents."""
        ...
