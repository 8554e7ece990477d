"""
Session registry interface.

Bidirectional mapping between live connection IDs and user IDs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class ISessionRegistry(ABC):
    """Abstract interface for the connection <-> user index."""

    @abstractmethod
    async def register(self, connection_id: str, user_id: str) -> bool:
        """
        Attach a connection to a user.

        Idempotent; a previous owner of the connection is replaced.

        Returns:
            True if this is the user's first live connection.
        """
        pass

    @abstractmethod
    async def unregister(self, connection_id: str) -> Optional[str]:
        """Remove a connection and return the user that owned it."""
        pass

    @abstractmethod
    async def get_user_id(self, connection_id: str) -> Optional[str]:
        """User attached to a connection, if any."""
        pass

    @abstractmethod
    async def resolve_connection(self, user_id: str) -> Optional[str]:
        """Most recently registered live connection of a user."""
        pass

    @abstractmethod
    async def resolve_connections(self, user_id: str) -> list[str]:
        """All live connections of a user, oldest first."""
        pass

    @abstractmethod
    async def is_online(self, user_id: str) -> bool:
        """True iff the user has at least one live connection."""
        pass

    @abstractmethod
    async def online_user_ids(self) -> set[str]:
        """IDs of all users with a live connection."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of live connections."""
        pass
