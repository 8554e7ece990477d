"""In-memory session registry implementation."""

from __future__ import annotations

import asyncio
from typing import Optional

from chatcore.interfaces.session_registry import ISessionRegistry


class InMemorySessionRegistry(ISessionRegistry):
    """Bidirectional connection <-> user index.

    Both directions are updated under one lock so a lookup never sees a
    connection without its owner or vice versa. A user may hold several
    connections; they are kept in registration order.
    """

    def __init__(self):
        self._user_by_connection: dict[str, str] = {}
        self._connections_by_user: dict[str, dict[str, None]] = {}
        self._lock = asyncio.Lock()

    def _detach(self, connection_id: str) -> Optional[str]:
        user_id = self._user_by_connection.pop(connection_id, None)
        if user_id is None:
            return None
        connections = self._connections_by_user.get(user_id)
        if connections is not None:
            connections.pop(connection_id, None)
            if not connections:
                self._connections_by_user.pop(user_id, None)
        return user_id

    async def register(self, connection_id: str, user_id: str) -> bool:
        async with self._lock:
            if self._user_by_connection.get(connection_id) == user_id:
                return False
            self._detach(connection_id)
            connections = self._connections_by_user.setdefault(user_id, {})
            first = not connections
            connections[connection_id] = None
            self._user_by_connection[connection_id] = user_id
            return first

    async def unregister(self, connection_id: str) -> Optional[str]:
        async with self._lock:
            return self._detach(connection_id)

    async def get_user_id(self, connection_id: str) -> Optional[str]:
        async with self._lock:
            return self._user_by_connection.get(connection_id)

    async def resolve_connection(self, user_id: str) -> Optional[str]:
        async with self._lock:
            connections = self._connections_by_user.get(user_id)
            if not connections:
                return None
            return next(reversed(connections))

    async def resolve_connections(self, user_id: str) -> list[str]:
        async with self._lock:
            return list(self._connections_by_user.get(user_id, {}))

    async def is_online(self, user_id: str) -> bool:
        async with self._lock:
            return bool(self._connections_by_user.get(user_id))

    async def online_user_ids(self) -> set[str]:
        async with self._lock:
            return set(self._connections_by_user)

    async def count(self) -> int:
        async with self._lock:
            return len(self._user_by_connection)
