"""
Chat repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chatcore.models.chat import Chat, ChatCreate, Message


class IChatRepository(ABC):
    """Abstract interface for chats and their message history."""

    @abstractmethod
    async def create(self, data: ChatCreate) -> Chat:
        """
        Create a chat.

        Raises:
            ChatAlreadyExistsError: if a chat with the same participant set exists
        """
        pass

    @abstractmethod
    async def get(self, chat_id: str) -> Optional[Chat]:
        """Get a chat by ID."""
        pass

    @abstractmethod
    async def find_by_participants(self, participant_ids: list[str]) -> Optional[Chat]:
        """Chat whose participant set equals the given IDs (order-independent)."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Chat]:
        """Chats the user participates in, most recently updated first."""
        pass

    @abstractmethod
    async def append_message(self, chat_id: str, message: Message) -> Optional[Chat]:
        """
        Append a message, update ``last_message``/``updated_at`` and
        compact the history once it grows past the configured limit.
        """
        pass

    @abstractmethod
    async def get_messages(self, chat_id: str, limit: int) -> list[Message]:
        """Newest ``limit`` messages in send order."""
        pass

    @abstractmethod
    async def increment_unread(self, chat_id: str, by: int = 1) -> int:
        """Increase the unread counter. Returns the new value."""
        pass

    @abstractmethod
    async def mark_read(self, chat_id: str) -> None:
        """Reset the unread counter to zero."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of chats."""
        pass
