"""
Friendship and friend request models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from chatcore.models.base import CamelModel
from chatcore.models.user import UserSummary


class FriendRequestStatus(str, Enum):
    """Friend request lifecycle. Non-pending states are terminal."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class FriendRequest(CamelModel):
    """A request from one user to befriend another."""

    id: str
    from_user_id: str
    to_user_id: str
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    created_at: datetime
    responded_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == FriendRequestStatus.PENDING


class Friend(CamelModel):
    """Friend entry as shown in a friends list."""

    id: str
    name: str
    email: str
    avatar: str
    is_online: bool
    last_seen: datetime


class PendingFriendRequest(CamelModel):
    """Incoming pending request with the sender's card."""

    id: str
    from_user: UserSummary
    created_at: datetime
