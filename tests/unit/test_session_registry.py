"""
Unit tests for InMemorySessionRegistry.
"""

import pytest

from chatcore.infrastructure.local.session_registry import InMemorySessionRegistry


@pytest.fixture
def registry():
    return InMemorySessionRegistry()


class TestRegister:
    @pytest.mark.asyncio
    async def test_first_connection_reports_first(self, registry):
        assert await registry.register("c1", "alice") is True
        assert await registry.get_user_id("c1") == "alice"
        assert await registry.resolve_connection("alice") == "c1"

    @pytest.mark.asyncio
    async def test_second_connection_is_not_first(self, registry):
        await registry.register("c1", "alice")
        assert await registry.register("c2", "alice") is False
        assert await registry.resolve_connections("alice") == ["c1", "c2"]

    @pytest.mark.asyncio
    async def test_register_is_idempotent(self, registry):
        await registry.register("c1", "alice")
        assert await registry.register("c1", "alice") is False
        assert await registry.count() == 1

    @pytest.mark.asyncio
    async def test_rebinding_connection_detaches_previous_owner(self, registry):
        await registry.register("c1", "alice")
        assert await registry.register("c1", "bob") is True
        assert await registry.get_user_id("c1") == "bob"
        assert await registry.is_online("alice") is False
        assert await registry.resolve_connection("alice") is None

    @pytest.mark.asyncio
    async def test_resolve_connection_returns_most_recent(self, registry):
        await registry.register("c1", "alice")
        await registry.register("c2", "alice")
        assert await registry.resolve_connection("alice") == "c2"


class TestUnregister:
    @pytest.mark.asyncio
    async def test_unregister_returns_owner(self, registry):
        await registry.register("c1", "alice")
        assert await registry.unregister("c1") == "alice"
        assert await registry.get_user_id("c1") is None
        assert await registry.is_online("alice") is False

    @pytest.mark.asyncio
    async def test_unregister_unknown_connection(self, registry):
        assert await registry.unregister("missing") is None

    @pytest.mark.asyncio
    async def test_user_stays_online_until_last_connection(self, registry):
        await registry.register("c1", "alice")
        await registry.register("c2", "alice")
        await registry.unregister("c2")
        assert await registry.is_online("alice") is True
        assert await registry.resolve_connection("alice") == "c1"
        await registry.unregister("c1")
        assert await registry.is_online("alice") is False

    @pytest.mark.asyncio
    async def test_online_user_ids_and_count(self, registry):
        await registry.register("c1", "alice")
        await registry.register("c2", "alice")
        await registry.register("c3", "bob")
        assert await registry.online_user_ids() == {"alice", "bob"}
        assert await registry.count() == 3
