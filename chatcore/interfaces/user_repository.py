"""
User repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from chatcore.models.user import User, UserCreate, UserStatus


class IUserRepository(ABC):
    """Abstract interface for the user directory."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        pass

    @abstractmethod
    async def get_many(self, user_ids: list[str]) -> dict[str, User]:
        """Get several users keyed by ID; unknown IDs are omitted."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        pass

    @abstractmethod
    async def create(self, data: UserCreate) -> User:
        """Create a new user."""
        pass

    @abstractmethod
    async def ensure(self, data: UserCreate) -> User:
        """Return the user with ``data.id``, creating it if unknown."""
        pass

    @abstractmethod
    async def set_presence(
        self,
        user_id: str,
        status: UserStatus,
        last_seen: datetime,
    ) -> Optional[User]:
        """Update stored status and last-seen timestamp."""
        pass

    @abstractmethod
    async def search(
        self,
        query: str,
        exclude_user_id: Optional[str] = None,
        limit: int = 20,
    ) -> list[User]:
        """Search users by name or email (partial, case-insensitive)."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of users in the directory."""
        pass
