"""
Mock authentication provider for local development.
"""

from chatcore.core.exceptions import AuthenticationError
from chatcore.interfaces.auth_provider import AuthUser, IAuthProvider


class MockAuthProvider(IAuthProvider):
    """Mock auth provider: the token is taken as the user id."""

    def __init__(self, enabled: bool = True):
        """
        Initialize mock auth provider.

        Args:
            enabled: Whether authentication is required
        """
        self._enabled = enabled

    async def verify_token(self, token: str) -> AuthUser:
        """
        Verify token - in mock mode, token is treated as user_id.

        An e-mail shaped token becomes both the id and the e-mail address.
        """
        token = (token or "").strip()
        if not token:
            raise AuthenticationError("Empty token")
        if "@" in token:
            return AuthUser(id=token, email=token, name=token.split("@", 1)[0])
        return AuthUser(id=token, email=f"{token}@example.com", name=token)

    def is_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return self._enabled
