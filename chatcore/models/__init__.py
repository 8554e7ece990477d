"""Pydantic models (schemas) for the application."""

from chatcore.models.call import Call, CallStatus, CallType
from chatcore.models.chat import (
    Chat,
    ChatCreate,
    ChatSummary,
    ChatType,
    Message,
    ParticipantCard,
)
from chatcore.models.events import InboundEnvelope, InboundEvent, OutboundEvent
from chatcore.models.friend import (
    Friend,
    FriendRequest,
    FriendRequestStatus,
    PendingFriendRequest,
)
from chatcore.models.user import (
    User,
    UserCreate,
    UserProfile,
    UserSearchResult,
    UserStatus,
    UserSummary,
)

__all__ = [
    # User
    "User",
    "UserCreate",
    "UserProfile",
    "UserSearchResult",
    "UserStatus",
    "UserSummary",
    # Friends
    "Friend",
    "FriendRequest",
    "FriendRequestStatus",
    "PendingFriendRequest",
    # Chat
    "Chat",
    "ChatCreate",
    "ChatSummary",
    "ChatType",
    "Message",
    "ParticipantCard",
    # Call
    "Call",
    "CallStatus",
    "CallType",
    # Events
    "InboundEnvelope",
    "InboundEvent",
    "OutboundEvent",
]
