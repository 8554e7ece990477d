"""
Presence tracking.

Online/offline is derived from live sessions. The stored status and
last-seen timestamp are only a record of the most recent transition.
"""

import asyncio
from typing import Optional

from chatcore.core.logger import logger
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.events import OutboundEvent
from chatcore.models.user import User, UserStatus
from chatcore.services.realtime_service import EventPublisher
from chatcore.utils.datetime_utils import now_utc


class PresenceService:
    """Connect/disconnect transitions and friend status fan-out.

    A user is online from their first live connection until their last one
    closes; friends are notified only on those two edges.
    """

    def __init__(
        self,
        sessions: ISessionRegistry,
        user_repo: IUserRepository,
        friend_repo: IFriendRepository,
        publisher: EventPublisher,
    ):
        self._sessions = sessions
        self._user_repo = user_repo
        self._friend_repo = friend_repo
        self._publisher = publisher
        # register/unregister, status update and fan-out run as one unit
        self._lock = asyncio.Lock()

    async def is_online(self, user_id: str) -> bool:
        return await self._sessions.is_online(user_id)

    async def connect(self, connection_id: str, user_id: str) -> bool:
        """
        Attach an authenticated connection to a user.

        Returns:
            True if the user just came online.
        """
        async with self._lock:
            previous = await self._sessions.get_user_id(connection_id)
            first = await self._sessions.register(connection_id, user_id)
            if previous and previous != user_id:
                await self._go_offline_if_idle(previous)
            if first:
                user = await self._user_repo.set_presence(user_id, UserStatus.ONLINE, now_utc())
                if user:
                    logger.info(f"User {user.name} ({user.id}) is online")
                    await self._notify_friends(user)
            return first

    async def disconnect(self, connection_id: str) -> Optional[str]:
        """
        Drop a connection.

        Returns:
            The user that owned the connection, if it was authenticated.
        """
        async with self._lock:
            user_id = await self._sessions.unregister(connection_id)
            if user_id:
                await self._go_offline_if_idle(user_id)
            return user_id

    async def _go_offline_if_idle(self, user_id: str) -> None:
        if await self._sessions.is_online(user_id):
            return
        user = await self._user_repo.set_presence(user_id, UserStatus.OFFLINE, now_utc())
        if user:
            logger.info(f"User {user.name} ({user.id}) went offline")
            await self._notify_friends(user)

    async def _notify_friends(self, user: User) -> None:
        friend_ids = await self._friend_repo.list_friend_ids(user.id)
        await self._publisher.to_users(
            friend_ids,
            OutboundEvent.FRIEND_STATUS_CHANGED,
            {
                "userId": user.id,
                "name": user.name,
                "status": user.status,
                "lastSeen": user.last_seen,
            },
        )
