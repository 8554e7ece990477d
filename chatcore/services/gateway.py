"""
Socket event gateway.

Validates inbound frames, binds connections to users on ``authenticate`` and
dispatches every other event to the owning service. Each inbound event ends
in its success event(s) or in exactly one ``operation_failed`` sent back to
the originating connection.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from chatcore.core.exceptions import AuthenticationError, ChatCoreError
from chatcore.core.logger import logger
from chatcore.interfaces.auth_provider import IAuthProvider
from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.models.events import (
    PAYLOAD_MODELS,
    AuthenticatePayload,
    CallRefPayload,
    ChatRefPayload,
    CreateChatPayload,
    FriendRequestRefPayload,
    InboundEnvelope,
    InboundEvent,
    OutboundEvent,
    RemoveFriendPayload,
    SendFriendRequestPayload,
    SendMessagePayload,
    StartCallPayload,
)
from chatcore.models.user import UserSummary
from chatcore.services.call_service import CallService
from chatcore.services.chat_service import ChatService
from chatcore.services.friend_service import FriendService
from chatcore.services.message_service import MessageService
from chatcore.services.presence_service import PresenceService
from chatcore.services.realtime_service import EventPublisher
from chatcore.services.user_service import UserService

Handler = Callable[[str, str, Any], Awaitable[None]]

INTERNAL_ERROR = "internal_error"


def describe_validation_error(exc: PydanticValidationError) -> str:
    """First validation problem as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "Invalid payload"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


class EventGateway:
    def __init__(
        self,
        auth_provider: IAuthProvider,
        sessions: ISessionRegistry,
        publisher: EventPublisher,
        user_service: UserService,
        presence_service: PresenceService,
        friend_service: FriendService,
        chat_service: ChatService,
        message_service: MessageService,
        call_service: CallService,
    ):
        self._auth = auth_provider
        self._sessions = sessions
        self._publisher = publisher
        self._users = user_service
        self._presence = presence_service
        self._friends = friend_service
        self._chats = chat_service
        self._messages = message_service
        self._calls = call_service
        self._handlers: dict[InboundEvent, Handler] = {
            InboundEvent.SEND_MESSAGE: self._send_message,
            InboundEvent.FETCH_MESSAGES: self._fetch_messages,
            InboundEvent.CREATE_CHAT: self._create_chat,
            InboundEvent.START_CALL: self._start_call,
            InboundEvent.ACCEPT_CALL: self._accept_call,
            InboundEvent.REJECT_CALL: self._reject_call,
            InboundEvent.END_CALL: self._end_call,
            InboundEvent.SEND_FRIEND_REQUEST: self._send_friend_request,
            InboundEvent.ACCEPT_FRIEND_REQUEST: self._accept_friend_request,
            InboundEvent.REJECT_FRIEND_REQUEST: self._reject_friend_request,
            InboundEvent.REMOVE_FRIEND: self._remove_friend,
        }

    async def handle(self, connection_id: str, raw: Union[str, bytes, dict[str, Any]]) -> None:
        """Process one inbound frame. Never raises for client mistakes."""
        event_name: Optional[str] = None
        try:
            frame = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            if isinstance(frame, dict) and isinstance(frame.get("type"), str):
                event_name = frame["type"]
            envelope = InboundEnvelope.model_validate(frame)
        except (json.JSONDecodeError, UnicodeDecodeError):
            await self._fail(connection_id, None, "validation_error", "Malformed JSON")
            return
        except PydanticValidationError as exc:
            await self._fail(connection_id, event_name, "validation_error", describe_validation_error(exc))
            return

        event = envelope.type
        if event == InboundEvent.AUTHENTICATE:
            await self._authenticate(connection_id, envelope.data)
            return
        if event == InboundEvent.PING:
            await self._publisher.to_connection(connection_id, OutboundEvent.PONG, {})
            return

        try:
            user_id = await self._sessions.get_user_id(connection_id)
            if not user_id:
                raise AuthenticationError("Not authenticated")
            payload = PAYLOAD_MODELS[event].model_validate(envelope.data or {})
            await self._handlers[event](connection_id, user_id, payload)
        except PydanticValidationError as exc:
            await self._fail(connection_id, event.value, "validation_error", describe_validation_error(exc))
        except ChatCoreError as exc:
            await self._fail(connection_id, event.value, exc.code, exc.message)
        except Exception:
            logger.exception(f"Unhandled error while processing {event.value} from {connection_id}")
            await self._fail(connection_id, event.value, INTERNAL_ERROR, "Internal server error")

    async def disconnect(self, connection_id: str) -> Optional[str]:
        user_id = await self._presence.disconnect(connection_id)
        if user_id:
            logger.info(f"Connection {connection_id} of user {user_id} closed")
        return user_id

    async def _fail(self, connection_id: str, event: Optional[str], code: str, reason: str) -> None:
        logger.debug(f"{event or 'frame'} from {connection_id} failed: {code} ({reason})")
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.OPERATION_FAILED,
            {"event": event, "code": code, "reason": reason},
        )

    # ===========================================
    # Authentication
    # ===========================================

    async def _authenticate(self, connection_id: str, data: Any) -> None:
        try:
            payload = AuthenticatePayload.model_validate(data or {})
            identity = await self._auth.verify_token(payload.token)
            user = await self._users.ensure_user(identity)
        except PydanticValidationError:
            await self._auth_error(connection_id, "Token is required")
            return
        except ChatCoreError as exc:
            await self._auth_error(connection_id, exc.message)
            return
        except Exception:
            logger.exception(f"Authentication of {connection_id} failed unexpectedly")
            await self._auth_error(connection_id, "Authentication failed")
            return

        await self._presence.connect(connection_id, user.id)
        logger.info(f"Connection {connection_id} authenticated as {user.name} ({user.id})")

        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.AUTHENTICATED,
            {"success": True, "userId": user.id, "user": UserSummary.from_user(user)},
        )
        await self._publisher.to_connection(
            connection_id, OutboundEvent.FRIENDS_LIST, await self._friends.list_friends(user.id)
        )
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.FRIEND_REQUESTS,
            await self._friends.list_pending_requests(user.id),
        )
        await self._publisher.to_connection(
            connection_id, OutboundEvent.CHATS_LIST, await self._chats.list_chats(user.id)
        )

    async def _auth_error(self, connection_id: str, error: str) -> None:
        logger.info(f"Authentication failed for {connection_id}: {error}")
        await self._publisher.to_connection(connection_id, OutboundEvent.AUTH_ERROR, {"error": error})

    # ===========================================
    # Messaging
    # ===========================================

    async def _send_message(self, connection_id: str, user_id: str, payload: SendMessagePayload) -> None:
        message = await self._messages.send_message(user_id, payload.chat_id, payload.text)
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.MESSAGE_SENT,
            {"chatId": payload.chat_id, "message": message},
        )

    async def _fetch_messages(self, connection_id: str, user_id: str, payload: ChatRefPayload) -> None:
        messages = await self._chats.read_messages(user_id, payload.chat_id)
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.CHAT_MESSAGES,
            {"chatId": payload.chat_id, "messages": messages},
        )

    async def _create_chat(self, connection_id: str, user_id: str, payload: CreateChatPayload) -> None:
        # chat_created reaches the creator through the participant fan-out
        await self._chats.create_chat(user_id, payload.participant_ids, payload.name)

    # ===========================================
    # Calls
    # ===========================================

    async def _start_call(self, connection_id: str, user_id: str, payload: StartCallPayload) -> None:
        await self._calls.start_call(user_id, payload.chat_id, payload.type)

    async def _accept_call(self, connection_id: str, user_id: str, payload: CallRefPayload) -> None:
        await self._calls.accept_call(user_id, payload.call_id)

    async def _reject_call(self, connection_id: str, user_id: str, payload: CallRefPayload) -> None:
        await self._calls.reject_call(user_id, payload.call_id)

    async def _end_call(self, connection_id: str, user_id: str, payload: CallRefPayload) -> None:
        await self._calls.end_call(user_id, payload.call_id)

    # ===========================================
    # Friends
    # ===========================================

    async def _send_friend_request(
        self, connection_id: str, user_id: str, payload: SendFriendRequestPayload
    ) -> None:
        if payload.user_id:
            request = await self._friends.send_request(user_id, payload.user_id)
        else:
            request = await self._friends.send_request_by_email(user_id, payload.friend_email or "")
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.FRIEND_REQUEST_SENT,
            {"requestId": request.id, "toUserId": request.to_user_id, "createdAt": request.created_at},
        )

    async def _accept_friend_request(
        self, connection_id: str, user_id: str, payload: FriendRequestRefPayload
    ) -> None:
        result = await self._friends.accept_request(payload.request_id, user_id)
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.FRIEND_REQUEST_ACCEPTED,
            {
                "requestId": result.request.id,
                "friendId": result.request.from_user_id,
                "chatId": result.chat.id,
            },
        )

    async def _reject_friend_request(
        self, connection_id: str, user_id: str, payload: FriendRequestRefPayload
    ) -> None:
        request = await self._friends.reject_request(payload.request_id, user_id)
        await self._publisher.to_connection(
            connection_id, OutboundEvent.FRIEND_REQUEST_REJECTED, {"requestId": request.id}
        )

    async def _remove_friend(self, connection_id: str, user_id: str, payload: RemoveFriendPayload) -> None:
        removed = await self._friends.remove_friend(user_id, payload.friend_id)
        await self._publisher.to_connection(
            connection_id,
            OutboundEvent.FRIEND_REMOVED,
            {"friendId": payload.friend_id, "removed": removed},
        )
