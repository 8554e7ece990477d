"""
Unit tests for authentication providers.
"""

import pytest

from chatcore.core.config import Settings
from chatcore.core.exceptions import AuthenticationError
from chatcore.core.security import create_access_token
from chatcore.infrastructure.auth.local_auth import LocalAuthProvider
from chatcore.infrastructure.local.mock_auth import MockAuthProvider
from chatcore.interfaces.auth_provider import AuthUser
from chatcore.services.user_service import identity_to_user_create


class TestMockAuthProvider:
    @pytest.mark.asyncio
    async def test_token_is_user_id(self):
        identity = await MockAuthProvider().verify_token("alice")
        assert identity.id == "alice"
        assert identity.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_email_token(self):
        identity = await MockAuthProvider().verify_token("bob@mail.test")
        assert identity.id == "bob@mail.test"
        assert identity.email == "bob@mail.test"
        assert identity.name == "bob"

    @pytest.mark.asyncio
    async def test_empty_token(self):
        with pytest.raises(AuthenticationError):
            await MockAuthProvider().verify_token("  ")


class TestLocalAuthProvider:
    def _settings(self, **overrides):
        values = {"ENVIRONMENT": "test", "LOCAL_JWT_SECRET": "secret", **overrides}
        return Settings(**values)

    @pytest.mark.asyncio
    async def test_valid_token(self):
        settings = self._settings()
        token = create_access_token("u1", settings, email="u1@example.com", name="User One")

        identity = await LocalAuthProvider(settings).verify_token(token)

        assert identity == AuthUser(id="u1", email="u1@example.com", name="User One")

    @pytest.mark.asyncio
    async def test_wrong_secret(self):
        token = create_access_token("u1", self._settings(LOCAL_JWT_SECRET="other"))
        with pytest.raises(AuthenticationError):
            await LocalAuthProvider(self._settings()).verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_issuer(self):
        token = create_access_token("u1", self._settings(LOCAL_JWT_ISSUER="elsewhere"))
        with pytest.raises(AuthenticationError):
            await LocalAuthProvider(self._settings()).verify_token(token)

    @pytest.mark.asyncio
    async def test_garbage_token(self):
        with pytest.raises(AuthenticationError):
            await LocalAuthProvider(self._settings()).verify_token("not-a-jwt")

    def test_secret_required(self):
        with pytest.raises(ValueError):
            LocalAuthProvider(Settings(ENVIRONMENT="test", LOCAL_JWT_SECRET=""))


def test_identity_without_profile_fields():
    data = identity_to_user_create(AuthUser(id="u1"))
    assert data.email == "u1@example.com"
    assert data.name == "u1"
