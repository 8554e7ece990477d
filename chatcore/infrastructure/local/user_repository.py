"""In-memory user directory implementation."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from chatcore.core.exceptions import ConflictError
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.user import User, UserCreate, UserStatus, avatar_initial
from chatcore.utils.datetime_utils import now_utc


class InMemoryUserRepository(IUserRepository):
    """In-memory implementation of the user directory.

    Users are kept in insertion order; an e-mail index allows
    case-insensitive lookup.
    """

    def __init__(self):
        self._users: dict[str, User] = {}
        self._email_index: dict[str, str] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _email_key(email: str) -> str:
        return email.strip().lower()

    def _insert(self, data: UserCreate) -> User:
        if data.id in self._users:
            raise ConflictError(f"User {data.id} already exists")
        email_key = self._email_key(data.email)
        if email_key in self._email_index:
            raise ConflictError(f"Email {data.email} is already registered")
        now = now_utc()
        user = User(
            id=data.id,
            name=data.name,
            email=data.email.strip(),
            avatar=avatar_initial(data.name),
            status=UserStatus.OFFLINE,
            last_seen=now,
            created_at=now,
        )
        self._users[user.id] = user
        self._email_index[email_key] = user.id
        return user

    async def get(self, user_id: str) -> Optional[User]:
        async with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    async def get_many(self, user_ids: list[str]) -> dict[str, User]:
        async with self._lock:
            return {
                user_id: self._users[user_id].model_copy()
                for user_id in user_ids
                if user_id in self._users
            }

    async def get_by_email(self, email: str) -> Optional[User]:
        async with self._lock:
            user_id = self._email_index.get(self._email_key(email))
            return self._users[user_id].model_copy() if user_id else None

    async def create(self, data: UserCreate) -> User:
        async with self._lock:
            return self._insert(data).model_copy()

    async def ensure(self, data: UserCreate) -> User:
        async with self._lock:
            user = self._users.get(data.id)
            if user is None:
                user = self._insert(data)
            return user.model_copy()

    async def set_presence(
        self,
        user_id: str,
        status: UserStatus,
        last_seen: datetime,
    ) -> Optional[User]:
        async with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            user.status = status
            user.last_seen = last_seen
            return user.model_copy()

    async def search(
        self,
        query: str,
        exclude_user_id: Optional[str] = None,
        limit: int = 20,
    ) -> list[User]:
        needle = query.strip().lower()
        if not needle:
            return []
        async with self._lock:
            results = []
            for user in self._users.values():
                if user.id == exclude_user_id:
                    continue
                if needle in user.email.lower() or needle in user.name.lower():
                    results.append(user.model_copy())
                    if len(results) >= limit:
                        break
            return results

    async def count(self) -> int:
        async with self._lock:
            return len(self._users)
