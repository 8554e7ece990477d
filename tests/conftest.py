"""
Shared fixtures: a fully wired in-memory messaging stack.
"""

import asyncio
import json
import os
from dataclasses import dataclass
from typing import Any, Optional

os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("AUTH_PROVIDER", "mock")

import pytest

from chatcore.core.config import Settings
from chatcore.infrastructure.local.call_repository import InMemoryCallRepository
from chatcore.infrastructure.local.chat_repository import InMemoryChatRepository
from chatcore.infrastructure.local.friend_repository import InMemoryFriendRepository
from chatcore.infrastructure.local.mock_auth import MockAuthProvider
from chatcore.infrastructure.local.session_registry import InMemorySessionRegistry
from chatcore.infrastructure.local.user_repository import InMemoryUserRepository
from chatcore.models.user import User, UserCreate
from chatcore.services.call_service import CallService
from chatcore.services.chat_service import ChatService
from chatcore.services.friend_service import FriendService
from chatcore.services.gateway import EventGateway
from chatcore.services.message_service import MessageService
from chatcore.services.presence_service import PresenceService
from chatcore.services.realtime_service import EventPublisher, RealtimeManager
from chatcore.services.user_service import UserService


@dataclass
class Stack:
    settings: Settings
    users: InMemoryUserRepository
    sessions: InMemorySessionRegistry
    friends: InMemoryFriendRepository
    chats: InMemoryChatRepository
    calls: InMemoryCallRepository
    realtime: RealtimeManager
    publisher: EventPublisher
    user_service: UserService
    presence: PresenceService
    chat_service: ChatService
    message_service: MessageService
    friend_service: FriendService
    call_service: CallService
    gateway: EventGateway

    async def add_user(self, user_id: str, name: Optional[str] = None) -> User:
        return await self.users.create(
            UserCreate(id=user_id, name=name or user_id.capitalize(), email=f"{user_id}@example.com")
        )

    async def connect(self, user_id: str, connection_id: Optional[str] = None) -> asyncio.Queue:
        """Open an outbound queue and bind it to the user, as authenticate does."""
        connection_id = connection_id or f"conn-{user_id}"
        queue = await self.realtime.connect(connection_id)
        await self.presence.connect(connection_id, user_id)
        return queue

    async def befriend(self, user_a: str, user_b: str) -> None:
        await self.friends.add_friendship(user_a, user_b)

    @staticmethod
    def drain(queue: asyncio.Queue) -> list[dict[str, Any]]:
        """Pop every queued frame."""
        frames = []
        while not queue.empty():
            frames.append(json.loads(queue.get_nowait()))
        return frames

    @staticmethod
    def of_type(frames: list[dict[str, Any]], event: str) -> list[dict[str, Any]]:
        return [frame["data"] for frame in frames if frame["type"] == event]


def build_stack(settings: Optional[Settings] = None) -> Stack:
    settings = settings or Settings(ENVIRONMENT="test")
    users = InMemoryUserRepository()
    sessions = InMemorySessionRegistry()
    friends = InMemoryFriendRepository()
    chats = InMemoryChatRepository(
        history_limit=settings.MESSAGE_HISTORY_LIMIT,
        history_retain=settings.MESSAGE_HISTORY_RETAIN,
    )
    calls = InMemoryCallRepository()
    realtime = RealtimeManager()
    publisher = EventPublisher(sessions, realtime)
    user_service = UserService(users, friends, settings=settings)
    presence = PresenceService(sessions, users, friends, publisher)
    chat_service = ChatService(chats, users, publisher, settings=settings)
    message_service = MessageService(chats, users, publisher, settings=settings)
    friend_service = FriendService(friends, users, sessions, chat_service, publisher)
    call_service = CallService(calls, chats, users, publisher, settings=settings)
    gateway = EventGateway(
        auth_provider=MockAuthProvider(enabled=True),
        sessions=sessions,
        publisher=publisher,
        user_service=user_service,
        presence_service=presence,
        friend_service=friend_service,
        chat_service=chat_service,
        message_service=message_service,
        call_service=call_service,
    )
    return Stack(
        settings=settings,
        users=users,
        sessions=sessions,
        friends=friends,
        chats=chats,
        calls=calls,
        realtime=realtime,
        publisher=publisher,
        user_service=user_service,
        presence=presence,
        chat_service=chat_service,
        message_service=message_service,
        friend_service=friend_service,
        call_service=call_service,
        gateway=gateway,
    )


@pytest.fixture
def stack() -> Stack:
    return build_stack()


@pytest.fixture
def stack_factory():
    """Build a stack with custom settings."""
    return build_stack
