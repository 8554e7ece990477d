"""
Chat and message models.

A chat owns its message history; messages are immutable once appended.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from chatcore.models.base import CamelModel


class ChatType(str, Enum):
    """Chat kind, derived from the participant count."""

    PRIVATE = "private"
    GROUP = "group"

    @classmethod
    def for_participants(cls, count: int) -> "ChatType":
        return cls.GROUP if count > 2 else cls.PRIVATE


class Message(CamelModel):
    """A single chat message."""

    id: str
    chat_id: str
    sender_id: str
    sender_name: str
    sender_avatar: str
    text: str
    timestamp: datetime


class Chat(CamelModel):
    """Chat record owned by the chat repository."""

    id: str
    name: str
    type: ChatType
    participants: list[str] = Field(..., min_length=1)
    messages: list[Message] = Field(default_factory=list)
    last_message: Optional[Message] = None
    unread_count: int = Field(0, ge=0)
    created_at: datetime
    updated_at: datetime

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def participant_set(self) -> frozenset[str]:
        return frozenset(self.participants)


class ChatCreate(CamelModel):
    """Data for a new chat; participants already deduplicated."""

    name: str
    participants: list[str] = Field(..., min_length=1)
    messages: list[Message] = Field(default_factory=list)


class ParticipantCard(CamelModel):
    """Participant as embedded in chat listings."""

    id: str
    name: str
    avatar: str


class ChatSummary(CamelModel):
    """Chat as listed for a particular viewer."""

    id: str
    name: str
    type: ChatType
    participants: list[ParticipantCard]
    last_message: Optional[Message] = None
    unread_count: int = 0
    created_at: datetime
    updated_at: datetime
