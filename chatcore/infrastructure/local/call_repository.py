"""In-memory call store implementation."""

from __future__ import annotations

import asyncio
from typing import Optional

from chatcore.interfaces.call_repository import ICallRepository
from chatcore.models.call import Call, CallStatus


class InMemoryCallRepository(ICallRepository):
    """In-memory implementation of the live call store."""

    def __init__(self):
        self._calls: dict[str, Call] = {}
        self._lock = asyncio.Lock()

    async def create(self, call: Call) -> Call:
        async with self._lock:
            self._calls[call.id] = call.model_copy(deep=True)
            return call

    async def get(self, call_id: str) -> Optional[Call]:
        async with self._lock:
            call = self._calls.get(call_id)
            return call.model_copy(deep=True) if call else None

    async def add_participant(self, call_id: str, user_id: str) -> Optional[Call]:
        async with self._lock:
            call = self._calls.get(call_id)
            if not call:
                return None
            if user_id not in call.participants:
                call.participants.append(user_id)
            call.status = CallStatus.ACTIVE
            return call.model_copy(deep=True)

    async def delete(self, call_id: str) -> Optional[Call]:
        async with self._lock:
            return self._calls.pop(call_id, None)

    async def list(self) -> list[Call]:
        async with self._lock:
            return [c.model_copy(deep=True) for c in self._calls.values()]

    async def count(self) -> int:
        async with self._lock:
            return len(self._calls)
