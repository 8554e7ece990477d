"""
User directory models.

Users are provisioned from verified identities; presence fields are owned
by the presence service.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from chatcore.models.base import CamelModel


class UserStatus(str, Enum):
    """Stored presence status."""

    ONLINE = "online"
    OFFLINE = "offline"


def avatar_initial(name: str) -> str:
    """Upper-cased first character of a display name."""
    stripped = name.strip()
    return stripped[0].upper() if stripped else "?"


class UserCreate(CamelModel):
    """Identity handed over by an auth provider."""

    id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)


class User(CamelModel):
    """User stored in the directory."""

    id: str
    name: str
    email: str
    avatar: str
    status: UserStatus = UserStatus.OFFLINE
    last_seen: datetime
    created_at: datetime


class UserSummary(CamelModel):
    """Public user card embedded in events (no presence)."""

    id: str
    name: str
    email: Optional[str] = None
    avatar: str

    @classmethod
    def from_user(cls, user: User, include_email: bool = True) -> "UserSummary":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email if include_email else None,
            avatar=user.avatar,
        )


class UserProfile(CamelModel):
    """Full profile returned to the user themselves."""

    id: str
    name: str
    email: str
    avatar: str
    status: UserStatus
    last_seen: datetime
    created_at: datetime


class UserSearchResult(CamelModel):
    """Directory search hit annotated with relationship flags."""

    id: str
    name: str
    email: str
    avatar: str
    status: UserStatus
    last_seen: datetime
    is_friend: bool = False
    has_pending_request: bool = False
