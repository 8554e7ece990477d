"""
Integration tests for the WebSocket gateway endpoint.
"""

import pytest
from fastapi.testclient import TestClient

from chatcore.api.deps import reset_dependencies
from main import app


def receive_until(ws, event_type, limit=20):
    """Read frames until one of the given type arrives."""
    for _ in range(limit):
        frame = ws.receive_json()
        if frame["type"] == event_type:
            return frame["data"]
    raise AssertionError(f"{event_type} not received")


def authenticate(ws, token):
    ws.send_json({"type": "authenticate", "data": {"token": token}})
    frames = [ws.receive_json() for _ in range(4)]
    assert [f["type"] for f in frames] == ["authenticated", "friends_list", "friend_requests", "chats_list"]
    return frames


@pytest.fixture
def client():
    reset_dependencies()
    with TestClient(app) as test_client:
        yield test_client
    reset_dependencies()


def test_ping_pong(client):
    with client.websocket_connect("/api/realtime/ws") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}


def test_operation_before_authentication_fails(client):
    with client.websocket_connect("/api/realtime/ws") as ws:
        ws.send_json({"type": "create_chat", "data": {"participantIds": ["bob"]}})
        frame = ws.receive_json()
        assert frame["type"] == "operation_failed"
        assert frame["data"]["code"] == "not_authenticated"

        ws.send_text("not json at all")
        frame = ws.receive_json()
        assert frame["data"]["code"] == "validation_error"


def test_chat_and_presence_flow(client):
    with client.websocket_connect("/api/realtime/ws") as alice_ws:
        authenticate(alice_ws, "alice")

        with client.websocket_connect("/api/realtime/ws") as bob_ws:
            authenticate(bob_ws, "bob")

            alice_ws.send_json({"type": "send_friend_request", "data": {"userId": "bob"}})
            sent = receive_until(alice_ws, "friend_request_sent")
            incoming = receive_until(bob_ws, "friend_request")
            assert incoming["requestId"] == sent["requestId"]
            assert incoming["fromUser"]["id"] == "alice"

            bob_ws.send_json({"type": "accept_friend_request", "data": {"requestId": sent["requestId"]}})
            chat_id = receive_until(bob_ws, "friend_request_accepted")["chatId"]
            accepted = receive_until(alice_ws, "friend_request_accepted")
            assert accepted["chatId"] == chat_id

            alice_ws.send_json({"type": "send_message", "data": {"chatId": chat_id, "text": "hey bob"}})
            ack = receive_until(alice_ws, "message_sent")
            delivered = receive_until(bob_ws, "new_message")
            assert delivered["message"]["id"] == ack["message"]["id"]
            assert delivered["message"]["text"] == "hey bob"

        status = receive_until(alice_ws, "friend_status_changed")
        assert status["userId"] == "bob"
        assert status["status"] == "offline"


def test_call_signaling_flow(client):
    with client.websocket_connect("/api/realtime/ws") as alice_ws, client.websocket_connect(
        "/api/realtime/ws"
    ) as bob_ws:
        authenticate(alice_ws, "alice")
        authenticate(bob_ws, "bob")

        alice_ws.send_json({"type": "create_chat", "data": {"participantIds": ["bob"]}})
        chat_id = receive_until(alice_ws, "chat_created")["chat"]["id"]
        receive_until(bob_ws, "chat_created")

        alice_ws.send_json({"type": "start_call", "data": {"chatId": chat_id, "type": "voice"}})
        call_id = receive_until(alice_ws, "call_started")["callId"]
        ringing = receive_until(bob_ws, "incoming_call")
        assert ringing["callId"] == call_id
        assert ringing["callerId"] == "alice"

        bob_ws.send_json({"type": "reject_call", "data": {"callId": call_id}})
        assert receive_until(alice_ws, "call_rejected") == {"callId": call_id, "userId": "bob"}
        receive_until(bob_ws, "call_rejected")

        bob_ws.send_json({"type": "end_call", "data": {"callId": call_id}})
        failed = receive_until(bob_ws, "operation_failed")
        assert failed == {"event": "end_call", "code": "not_found", "reason": "Call not found"}


def test_binary_frames_do_not_close_the_socket(client):
    with client.websocket_connect("/api/realtime/ws") as ws:
        ws.send_bytes(b'{"type": "ping"}')
        assert ws.receive_json() == {"type": "pong", "data": {}}

        ws.send_bytes(b"{not json")
        frame = ws.receive_json()
        assert frame["type"] == "operation_failed"
        assert frame["data"]["code"] == "validation_error"

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong", "data": {}}
