"""
Auth provider interface.

The core never handles credentials; it only needs a provider that turns a
bearer token into a verified identity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class AuthUser(BaseModel):
    """Verified identity attached to a request or connection."""

    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for token verification."""

    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: if the token is invalid or expired
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if authentication is enforced."""
        pass
