"""
Local JWT authentication provider.
"""

from __future__ import annotations

from jose import JWTError, jwt

from chatcore.core.config import Settings
from chatcore.core.exceptions import AuthenticationError
from chatcore.interfaces.auth_provider import AuthUser, IAuthProvider


class LocalAuthProvider(IAuthProvider):
    """Local auth provider with HMAC JWT validation."""

    def __init__(self, settings: Settings):
        if not settings.LOCAL_JWT_SECRET:
            raise ValueError("LOCAL_JWT_SECRET must be set for local auth")
        self._settings = settings

    def _decode_token(self, token: str) -> dict[str, object]:
        options = {"verify_iss": bool(self._settings.LOCAL_JWT_ISSUER)}
        return jwt.decode(
            token,
            self._settings.LOCAL_JWT_SECRET,
            algorithms=["HS256"],
            issuer=self._settings.LOCAL_JWT_ISSUER or None,
            options=options,
        )

    async def verify_token(self, token: str) -> AuthUser:
        try:
            claims = self._decode_token(token)
        except JWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Missing subject")
        email = claims.get("email")
        name = claims.get("name")
        return AuthUser(
            id=str(subject),
            email=str(email) if email else None,
            name=str(name) if name else None,
        )

    def is_enabled(self) -> bool:
        return True
