import asyncio
import json
from collections.abc import Iterable
from typing import Any, Optional

from pydantic_core import to_jsonable_python

from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.models.events import OutboundEvent, outbound


class RealtimeManager:
    """Outbound queues, one per live connection."""

    def __init__(self) -> None:
        self._connections: dict[str, asyncio.Queue[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, connection_id: str) -> asyncio.Queue[str]:
        queue: asyncio.Queue[str] = asyncio.Queue()
        async with self._lock:
            self._connections[connection_id] = queue
        return queue

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._connections.pop(connection_id, None)

    async def publish(self, connection_id: str, payload: dict[str, Any]) -> bool:
        message = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        async with self._lock:
            queue = self._connections.get(connection_id)
        if queue is None:
            return False
        queue.put_nowait(message)
        return True

    async def publish_many(self, connection_ids: Iterable[str], payload: dict[str, Any]) -> int:
        message = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        async with self._lock:
            queues = [self._connections[c] for c in connection_ids if c in self._connections]
        for queue in queues:
            queue.put_nowait(message)
        return len(queues)

    async def count(self) -> int:
        async with self._lock:
            return len(self._connections)


def to_wire(data: Any) -> Any:
    """Convert models, datetimes and enums (nested anywhere) to JSON-safe camelCase data."""
    return to_jsonable_python(data, by_alias=True)


class EventPublisher:
    """Resolves users to their live connections and queues outbound events.

    Delivery is fire-and-forget: a user without a live connection is the
    normal unreachable-recipient case, reported through the return value.
    """

    def __init__(self, sessions: ISessionRegistry, realtime: RealtimeManager) -> None:
        self._sessions = sessions
        self._realtime = realtime

    async def to_connection(self, connection_id: str, event: OutboundEvent, data: Any) -> bool:
        return await self._realtime.publish(connection_id, outbound(event, to_wire(data)))

    async def to_user(self, user_id: str, event: OutboundEvent, data: Any) -> bool:
        """Send to every connection of a user. True if at least one received it."""
        connections = await self._sessions.resolve_connections(user_id)
        if not connections:
            return False
        delivered = await self._realtime.publish_many(connections, outbound(event, to_wire(data)))
        return delivered > 0

    async def to_users(
        self,
        user_ids: Iterable[str],
        event: OutboundEvent,
        data: Any,
        exclude: Optional[str] = None,
    ) -> set[str]:
        """Fan out to several users. Returns the IDs that were reachable."""
        payload = outbound(event, to_wire(data))
        reached: set[str] = set()
        for user_id in dict.fromkeys(user_ids):
            if user_id == exclude:
                continue
            connections = await self._sessions.resolve_connections(user_id)
            if connections and await self._realtime.publish_many(connections, payload):
                reached.add(user_id)
        return reached
