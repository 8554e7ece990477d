"""In-memory chat store implementation."""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import uuid4

from chatcore.core.config import get_settings
from chatcore.core.exceptions import ChatAlreadyExistsError
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.models.chat import Chat, ChatCreate, ChatType, Message
from chatcore.utils.datetime_utils import now_utc


class InMemoryChatRepository(IChatRepository):
    """In-memory implementation of the chat store.

    Chats are deduplicated by participant set: two chats never share
    exactly the same members. Message history is append-only and capped.
    """

    def __init__(
        self,
        history_limit: Optional[int] = None,
        history_retain: Optional[int] = None,
    ):
        settings = get_settings()
        self._history_limit = history_limit or settings.MESSAGE_HISTORY_LIMIT
        self._history_retain = history_retain or settings.MESSAGE_HISTORY_RETAIN
        if self._history_retain > self._history_limit:
            raise ValueError("history_retain must not exceed history_limit")
        self._chats: dict[str, Chat] = {}
        self._lock = asyncio.Lock()

    def _find_by_set(self, participants: frozenset[str]) -> Optional[Chat]:
        for chat in self._chats.values():
            if chat.participant_set() == participants:
                return chat
        return None

    async def create(self, data: ChatCreate) -> Chat:
        async with self._lock:
            existing = self._find_by_set(frozenset(data.participants))
            if existing:
                raise ChatAlreadyExistsError("Chat already exists", chat_id=existing.id)
            now = now_utc()
            chat_id = str(uuid4())
            messages = [m.model_copy(update={"chat_id": chat_id}) for m in data.messages]
            chat = Chat(
                id=chat_id,
                name=data.name,
                type=ChatType.for_participants(len(data.participants)),
                participants=list(data.participants),
                messages=messages,
                last_message=messages[-1] if messages else None,
                unread_count=0,
                created_at=now,
                updated_at=now,
            )
            self._chats[chat.id] = chat
            return chat.model_copy(deep=True)

    async def get(self, chat_id: str) -> Optional[Chat]:
        async with self._lock:
            chat = self._chats.get(chat_id)
            return chat.model_copy(deep=True) if chat else None

    async def find_by_participants(self, participant_ids: list[str]) -> Optional[Chat]:
        async with self._lock:
            chat = self._find_by_set(frozenset(participant_ids))
            return chat.model_copy(deep=True) if chat else None

    async def list_for_user(self, user_id: str) -> list[Chat]:
        async with self._lock:
            chats = [c for c in self._chats.values() if c.has_participant(user_id)]
            chats.sort(key=lambda c: c.updated_at, reverse=True)
            return [c.model_copy(deep=True) for c in chats]

    async def append_message(self, chat_id: str, message: Message) -> Optional[Chat]:
        async with self._lock:
            chat = self._chats.get(chat_id)
            if not chat:
                return None
            chat.messages.append(message)
            chat.last_message = message
            chat.updated_at = message.timestamp
            if len(chat.messages) > self._history_limit:
                chat.messages = chat.messages[-self._history_retain:]
            return chat.model_copy(deep=True)

    async def get_messages(self, chat_id: str, limit: int) -> list[Message]:
        async with self._lock:
            chat = self._chats.get(chat_id)
            if not chat or limit <= 0:
                return []
            return [m.model_copy() for m in chat.messages[-limit:]]

    async def increment_unread(self, chat_id: str, by: int = 1) -> int:
        if by < 0:
            raise ValueError("Unread counter can only grow")
        async with self._lock:
            chat = self._chats.get(chat_id)
            if not chat:
                return 0
            chat.unread_count += by
            return chat.unread_count

    async def mark_read(self, chat_id: str) -> None:
        async with self._lock:
            chat = self._chats.get(chat_id)
            if chat:
                chat.unread_count = 0

    async def count(self) -> int:
        async with self._lock:
            return len(self._chats)
