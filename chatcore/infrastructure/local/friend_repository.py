"""In-memory friend graph implementation."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional
from uuid import uuid4

from chatcore.core.exceptions import DuplicateRequestError
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.models.friend import FriendRequest, FriendRequestStatus
from chatcore.utils.datetime_utils import now_utc


class InMemoryFriendRepository(IFriendRepository):
    """In-memory implementation of the friend graph.

    Friendships are adjacency sets kept symmetric on every write.
    Requests are never deleted; terminal ones stay for history.
    """

    def __init__(self):
        self._friends: dict[str, set[str]] = {}
        self._requests: dict[str, FriendRequest] = {}
        self._lock = asyncio.Lock()

    async def are_friends(self, user_a: str, user_b: str) -> bool:
        async with self._lock:
            return user_b in self._friends.get(user_a, set())

    async def add_friendship(self, user_a: str, user_b: str) -> None:
        async with self._lock:
            self._friends.setdefault(user_a, set()).add(user_b)
            self._friends.setdefault(user_b, set()).add(user_a)

    async def remove_friendship(self, user_a: str, user_b: str) -> bool:
        async with self._lock:
            existed = user_b in self._friends.get(user_a, set())
            self._friends.get(user_a, set()).discard(user_b)
            self._friends.get(user_b, set()).discard(user_a)
            return existed

    async def list_friend_ids(self, user_id: str) -> list[str]:
        async with self._lock:
            return sorted(self._friends.get(user_id, set()))

    def _find_pending(self, from_user_id: str, to_user_id: str) -> Optional[FriendRequest]:
        for request in self._requests.values():
            if (
                request.from_user_id == from_user_id
                and request.to_user_id == to_user_id
                and request.is_pending
            ):
                return request
        return None

    async def create_request(self, from_user_id: str, to_user_id: str) -> FriendRequest:
        async with self._lock:
            if self._find_pending(from_user_id, to_user_id):
                raise DuplicateRequestError("Friend request already sent")
            request = FriendRequest(
                id=str(uuid4()),
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                status=FriendRequestStatus.PENDING,
                created_at=now_utc(),
            )
            self._requests[request.id] = request
            return request.model_copy()

    async def find_pending(self, from_user_id: str, to_user_id: str) -> Optional[FriendRequest]:
        async with self._lock:
            request = self._find_pending(from_user_id, to_user_id)
            return request.model_copy() if request else None

    async def list_pending_for(self, to_user_id: str) -> list[FriendRequest]:
        async with self._lock:
            return [
                r.model_copy()
                for r in self._requests.values()
                if r.to_user_id == to_user_id and r.is_pending
            ]

    async def resolve_request(
        self,
        request_id: str,
        to_user_id: str,
        status: FriendRequestStatus,
        responded_at: datetime,
    ) -> Optional[FriendRequest]:
        if status == FriendRequestStatus.PENDING:
            raise ValueError("A request can only be resolved to a terminal status")
        async with self._lock:
            request = self._requests.get(request_id)
            if not request or request.to_user_id != to_user_id or not request.is_pending:
                return None
            request.status = status
            request.responded_at = responded_at
            return request.model_copy()
