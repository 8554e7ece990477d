"""
Unit tests for CallService signaling.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from chatcore.core.config import Settings
from chatcore.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from chatcore.models.call import CallStatus, CallType

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
async def trio(stack):
    for user_id in ("alice", "bob", "carol", "dave"):
        await stack.add_user(user_id)
    chat = await stack.chat_service.create_chat("alice", ["bob", "carol"])
    queues = {user_id: await stack.connect(user_id) for user_id in ("alice", "bob", "carol", "dave")}
    for queue in queues.values():
        stack.drain(queue)
    return stack, chat, queues


class TestStartCall:
    @pytest.mark.asyncio
    async def test_rings_other_participants(self, trio):
        stack, chat, queues = trio

        call = await stack.call_service.start_call("alice", chat.id, CallType.VIDEO)

        assert call.status == CallStatus.CALLING
        assert call.participants == ["alice"]
        for callee in ("bob", "carol"):
            incoming = stack.of_type(stack.drain(queues[callee]), "incoming_call")
            assert len(incoming) == 1
            assert incoming[0]["callId"] == call.id
            assert incoming[0]["chatId"] == chat.id
            assert incoming[0]["callerId"] == "alice"
            assert incoming[0]["caller"]["name"] == "Alice"
            assert incoming[0]["type"] == "video"
        started = stack.of_type(stack.drain(queues["alice"]), "call_started")
        assert started[0]["callId"] == call.id
        assert started[0]["callData"]["status"] == "calling"
        assert stack.drain(queues["dave"]) == []

    @pytest.mark.asyncio
    async def test_non_member_cannot_start(self, trio):
        stack, chat, _ = trio
        with pytest.raises(ForbiddenError):
            await stack.call_service.start_call("dave", chat.id)

    @pytest.mark.asyncio
    async def test_unknown_chat(self, trio):
        stack, _, _ = trio
        with pytest.raises(NotFoundError):
            await stack.call_service.start_call("alice", "missing")


class TestAcceptCall:
    @pytest.mark.asyncio
    async def test_accept_activates_and_notifies_participants(self, trio):
        stack, chat, queues = trio
        call = await stack.call_service.start_call("alice", chat.id)
        for queue in queues.values():
            stack.drain(queue)

        updated = await stack.call_service.accept_call("bob", call.id)

        assert updated.status == CallStatus.ACTIVE
        assert updated.participants == ["alice", "bob"]
        for user_id in ("alice", "bob"):
            accepted = stack.of_type(stack.drain(queues[user_id]), "call_accepted")
            assert accepted[0]["userId"] == "bob"
            assert accepted[0]["callData"]["participants"] == ["alice", "bob"]
        # carol was rung but has not joined
        assert stack.drain(queues["carol"]) == []

    @pytest.mark.asyncio
    async def test_accept_twice_conflicts(self, trio):
        stack, chat, _ = trio
        call = await stack.call_service.start_call("alice", chat.id)
        await stack.call_service.accept_call("bob", call.id)
        with pytest.raises(ConflictError):
            await stack.call_service.accept_call("bob", call.id)

    @pytest.mark.asyncio
    async def test_outsider_cannot_accept(self, trio):
        stack, chat, _ = trio
        call = await stack.call_service.start_call("alice", chat.id)
        with pytest.raises(ForbiddenError):
            await stack.call_service.accept_call("dave", call.id)

    @pytest.mark.asyncio
    async def test_unknown_call(self, trio):
        stack, _, _ = trio
        with pytest.raises(NotFoundError):
            await stack.call_service.accept_call("bob", "missing")


class TestRejectAndEnd:
    @pytest.mark.asyncio
    async def test_reject_removes_call(self, trio):
        stack, chat, queues = trio
        call = await stack.call_service.start_call("alice", chat.id)
        for queue in queues.values():
            stack.drain(queue)

        await stack.call_service.reject_call("bob", call.id)

        assert await stack.calls.get(call.id) is None
        for user_id in ("alice", "bob"):
            rejected = stack.of_type(stack.drain(queues[user_id]), "call_rejected")
            assert rejected == [{"callId": call.id, "userId": "bob"}]

    @pytest.mark.asyncio
    async def test_end_reports_floored_duration(self, trio):
        stack, chat, queues = trio
        with patch("chatcore.services.call_service.now_utc", return_value=T0):
            call = await stack.call_service.start_call("alice", chat.id)
            await stack.call_service.accept_call("bob", call.id)
        for queue in queues.values():
            stack.drain(queue)

        ended_at = T0 + timedelta(seconds=75, milliseconds=900)
        with patch("chatcore.services.call_service.now_utc", return_value=ended_at):
            duration = await stack.call_service.end_call("bob", call.id)

        assert duration == 75
        assert await stack.calls.get(call.id) is None
        for user_id in ("alice", "bob"):
            ended = stack.of_type(stack.drain(queues[user_id]), "call_ended")
            assert ended[0]["callId"] == call.id
            assert ended[0]["duration"] == 75
            assert ended[0]["reason"] == "hangup"
        assert stack.of_type(stack.drain(queues["carol"]), "call_ended") == []

    @pytest.mark.asyncio
    async def test_end_while_ringing_stops_every_callee(self, trio):
        stack, chat, queues = trio
        call = await stack.call_service.start_call("alice", chat.id)
        for queue in queues.values():
            stack.drain(queue)

        await stack.call_service.end_call("alice", call.id)

        assert await stack.calls.count() == 0
        for user_id in ("alice", "bob", "carol"):
            ended = stack.of_type(stack.drain(queues[user_id]), "call_ended")
            assert ended[0]["callId"] == call.id
            assert ended[0]["reason"] == "hangup"
        assert stack.drain(queues["dave"]) == []

    @pytest.mark.asyncio
    async def test_end_unknown_call(self, trio):
        stack, _, _ = trio
        with pytest.raises(NotFoundError):
            await stack.call_service.end_call("alice", "missing")

    @pytest.mark.asyncio
    async def test_outsider_cannot_end(self, trio):
        stack, chat, _ = trio
        call = await stack.call_service.start_call("alice", chat.id)
        with pytest.raises(ForbiddenError):
            await stack.call_service.end_call("dave", call.id)
        assert await stack.calls.get(call.id) is not None


class TestRingTimeout:
    @pytest.mark.asyncio
    async def test_unanswered_call_expires(self, trio):
        stack, chat, queues = trio
        with patch("chatcore.services.call_service.now_utc", return_value=T0):
            call = await stack.call_service.start_call("alice", chat.id)
        for queue in queues.values():
            stack.drain(queue)

        expired = await stack.call_service.expire_unanswered(T0 + timedelta(seconds=61))

        assert expired == [call.id]
        assert await stack.calls.get(call.id) is None
        for user_id in ("alice", "bob", "carol"):
            ended = stack.of_type(stack.drain(queues[user_id]), "call_ended")
            assert ended[0]["reason"] == "timeout"
            assert ended[0]["duration"] == 61

    @pytest.mark.asyncio
    async def test_recent_and_active_calls_survive(self, trio):
        stack, chat, _ = trio
        with patch("chatcore.services.call_service.now_utc", return_value=T0):
            ringing = await stack.call_service.start_call("alice", chat.id)
            active = await stack.call_service.start_call("bob", chat.id)
            await stack.call_service.accept_call("carol", active.id)

        assert await stack.call_service.expire_unanswered(T0 + timedelta(seconds=30)) == []
        assert await stack.call_service.expire_unanswered(T0 + timedelta(seconds=120)) == [ringing.id]
        assert await stack.calls.get(active.id) is not None

    @pytest.mark.asyncio
    async def test_disabled_when_timeout_is_zero(self, stack_factory):
        stack = stack_factory(Settings(ENVIRONMENT="test", CALL_RING_TIMEOUT_SECONDS=0))
        await stack.add_user("alice")
        await stack.add_user("bob")
        chat = await stack.chat_service.create_chat("alice", ["bob"])
        with patch("chatcore.services.call_service.now_utc", return_value=T0):
            await stack.call_service.start_call("alice", chat.id)

        assert await stack.call_service.expire_unanswered(T0 + timedelta(days=1)) == []
        assert await stack.calls.count() == 1
