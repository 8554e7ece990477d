"""
Call repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from chatcore.models.call import Call


class ICallRepository(ABC):
    """Abstract interface for live call records."""

    @abstractmethod
    async def create(self, call: Call) -> Call:
        """Store a new call."""
        pass

    @abstractmethod
    async def get(self, call_id: str) -> Optional[Call]:
        """Get a call by ID."""
        pass

    @abstractmethod
    async def add_participant(self, call_id: str, user_id: str) -> Optional[Call]:
        """Append a participant and mark the call active."""
        pass

    @abstractmethod
    async def delete(self, call_id: str) -> Optional[Call]:
        """Remove a call and return its last state."""
        pass

    @abstractmethod
    async def list(self) -> list[Call]:
        """All live calls."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of live calls."""
        pass
