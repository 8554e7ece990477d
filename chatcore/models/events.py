"""
WebSocket event envelopes.

Every frame in either direction is ``{"type": <event name>, "data": {...}}``.
Inbound frames are validated against the closed set of events below before
they are dispatched.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from chatcore.models.base import CamelModel
from chatcore.models.call import CallType


class InboundEvent(str, Enum):
    """Client -> server events."""

    AUTHENTICATE = "authenticate"
    SEND_MESSAGE = "send_message"
    FETCH_MESSAGES = "fetch_messages"
    CREATE_CHAT = "create_chat"
    START_CALL = "start_call"
    ACCEPT_CALL = "accept_call"
    REJECT_CALL = "reject_call"
    END_CALL = "end_call"
    SEND_FRIEND_REQUEST = "send_friend_request"
    ACCEPT_FRIEND_REQUEST = "accept_friend_request"
    REJECT_FRIEND_REQUEST = "reject_friend_request"
    REMOVE_FRIEND = "remove_friend"
    PING = "ping"


class OutboundEvent(str, Enum):
    """Server -> client events."""

    AUTHENTICATED = "authenticated"
    AUTH_ERROR = "auth_error"
    FRIENDS_LIST = "friends_list"
    FRIEND_REQUESTS = "friend_requests"
    CHATS_LIST = "chats_list"
    CHAT_CREATED = "chat_created"
    CHAT_MESSAGES = "chat_messages"
    FRIEND_REQUEST = "friend_request"
    FRIEND_REQUEST_SENT = "friend_request_sent"
    FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
    FRIEND_REQUEST_REJECTED = "friend_request_rejected"
    FRIEND_REMOVED = "friend_removed"
    FRIEND_STATUS_CHANGED = "friend_status_changed"
    NEW_MESSAGE = "new_message"
    MESSAGE_SENT = "message_sent"
    INCOMING_CALL = "incoming_call"
    CALL_STARTED = "call_started"
    CALL_ACCEPTED = "call_accepted"
    CALL_REJECTED = "call_rejected"
    CALL_ENDED = "call_ended"
    OPERATION_FAILED = "operation_failed"
    PONG = "pong"


class InboundEnvelope(BaseModel):
    """Raw inbound frame."""

    type: InboundEvent
    data: Any = Field(default_factory=dict)


def outbound(event: OutboundEvent, data: Any) -> dict[str, Any]:
    """Build an outbound frame."""
    return {"type": event.value, "data": data}


# ===========================================
# Inbound payloads
# ===========================================


class AuthenticatePayload(CamelModel):
    token: str = Field(..., min_length=1)


class SendMessagePayload(CamelModel):
    chat_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class ChatRefPayload(CamelModel):
    chat_id: str = Field(..., min_length=1)


class CreateChatPayload(CamelModel):
    participant_ids: list[str]
    name: Optional[str] = Field(None, max_length=255)


class StartCallPayload(CamelModel):
    chat_id: str = Field(..., min_length=1)
    type: CallType = CallType.VOICE


class CallRefPayload(CamelModel):
    call_id: str = Field(..., min_length=1)


class SendFriendRequestPayload(CamelModel):
    friend_email: Optional[str] = None
    user_id: Optional[str] = None

    @model_validator(mode="after")
    def _one_target(self) -> "SendFriendRequestPayload":
        if not self.friend_email and not self.user_id:
            raise ValueError("friendEmail or userId is required")
        return self


class FriendRequestRefPayload(CamelModel):
    request_id: str = Field(..., min_length=1)


class RemoveFriendPayload(CamelModel):
    friend_id: str = Field(..., min_length=1)


class EmptyPayload(CamelModel):
    pass


PAYLOAD_MODELS: dict[InboundEvent, type[CamelModel]] = {
    InboundEvent.AUTHENTICATE: AuthenticatePayload,
    InboundEvent.SEND_MESSAGE: SendMessagePayload,
    InboundEvent.FETCH_MESSAGES: ChatRefPayload,
    InboundEvent.CREATE_CHAT: CreateChatPayload,
    InboundEvent.START_CALL: StartCallPayload,
    InboundEvent.ACCEPT_CALL: CallRefPayload,
    InboundEvent.REJECT_CALL: CallRefPayload,
    InboundEvent.END_CALL: CallRefPayload,
    InboundEvent.SEND_FRIEND_REQUEST: SendFriendRequestPayload,
    InboundEvent.ACCEPT_FRIEND_REQUEST: FriendRequestRefPayload,
    InboundEvent.REJECT_FRIEND_REQUEST: FriendRequestRefPayload,
    InboundEvent.REMOVE_FRIEND: RemoveFriendPayload,
    InboundEvent.PING: EmptyPayload,
}
