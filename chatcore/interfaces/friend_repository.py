"""
Friend graph repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from chatcore.models.friend import FriendRequest, FriendRequestStatus


class IFriendRepository(ABC):
    """Abstract interface for friendships and friend requests."""

    @abstractmethod
    async def are_friends(self, user_a: str, user_b: str) -> bool:
        """Check whether an edge exists between two users."""
        pass

    @abstractmethod
    async def add_friendship(self, user_a: str, user_b: str) -> None:
        """Insert the edge in both directions."""
        pass

    @abstractmethod
    async def remove_friendship(self, user_a: str, user_b: str) -> bool:
        """Delete the edge in both directions. Returns False if absent."""
        pass

    @abstractmethod
    async def list_friend_ids(self, user_id: str) -> list[str]:
        """IDs of a user's friends."""
        pass

    @abstractmethod
    async def create_request(self, from_user_id: str, to_user_id: str) -> FriendRequest:
        """
        Create a pending request.

        Raises:
            DuplicateRequestError: if a pending (from, to) request exists
        """
        pass

    @abstractmethod
    async def find_pending(self, from_user_id: str, to_user_id: str) -> Optional[FriendRequest]:
        """Pending request for the ordered pair, if any."""
        pass

    @abstractmethod
    async def list_pending_for(self, to_user_id: str) -> list[FriendRequest]:
        """Pending requests addressed to a user, oldest first."""
        pass

    @abstractmethod
    async def resolve_request(
        self,
        request_id: str,
        to_user_id: str,
        status: FriendRequestStatus,
        responded_at: datetime,
    ) -> Optional[FriendRequest]:
        """
        Move a pending request addressed to ``to_user_id`` into a terminal state.

        Returns None if no such pending request exists.
        """
        pass
