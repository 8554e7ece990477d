"""
Call signaling service.

Only signaling state lives here: who rang whom, who joined and when the
call started. Ending a call (hang-up, rejection or ring timeout) removes its
record.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from chatcore.core.config import Settings, get_settings
from chatcore.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from chatcore.core.logger import logger
from chatcore.interfaces.call_repository import ICallRepository
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.call import Call, CallStatus, CallType
from chatcore.models.events import OutboundEvent
from chatcore.models.user import UserSummary
from chatcore.services.realtime_service import EventPublisher
from chatcore.utils.datetime_utils import elapsed_seconds, now_utc

END_REASON_HANGUP = "hangup"
END_REASON_TIMEOUT = "timeout"


class CallService:
    def __init__(
        self,
        call_repo: ICallRepository,
        chat_repo: IChatRepository,
        user_repo: IUserRepository,
        publisher: EventPublisher,
        settings: Optional[Settings] = None,
    ):
        self._call_repo = call_repo
        self._chat_repo = chat_repo
        self._user_repo = user_repo
        self._publisher = publisher
        self._settings = settings or get_settings()

    async def start_call(
        self,
        caller_id: str,
        chat_id: str,
        call_type: CallType = CallType.VOICE,
    ) -> Call:
        """
        Ring every other participant of a chat.

        Raises:
            NotFoundError: unknown chat or caller
            ForbiddenError: caller is not a participant
        """
        chat = await self._chat_repo.get(chat_id)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")
        if not chat.has_participant(caller_id):
            raise ForbiddenError("No access to this chat")
        caller = await self._user_repo.get(caller_id)
        if not caller:
            raise NotFoundError(f"User {caller_id} not found")

        call = await self._call_repo.create(
            Call(
                id=str(uuid4()),
                chat_id=chat_id,
                caller_id=caller_id,
                caller_name=caller.name,
                type=call_type,
                participants=[caller_id],
                status=CallStatus.CALLING,
                start_time=now_utc(),
            )
        )
        logger.info(f"Call {call.id} ({call.type.value}) started by {caller_id} in chat {chat_id}")

        await self._publisher.to_users(
            chat.participants,
            OutboundEvent.INCOMING_CALL,
            {
                "callId": call.id,
                "chatId": chat_id,
                "caller": UserSummary.from_user(caller, include_email=False),
                "callerId": caller_id,
                "type": call.type,
            },
            exclude=caller_id,
        )
        await self._publisher.to_user(
            caller_id,
            OutboundEvent.CALL_STARTED,
            {"callId": call.id, "callData": call},
        )
        return call

    async def accept_call(self, user_id: str, call_id: str) -> Call:
        """
        Join a ringing or active call.

        Raises:
            NotFoundError: unknown call
            ForbiddenError: user is not a participant of the call's chat
            ConflictError: user is already in the call
        """
        call = await self._get_call_for_member(user_id, call_id)
        if user_id in call.participants:
            raise ConflictError("Already in this call")
        call = await self._call_repo.add_participant(call_id, user_id)
        if not call:
            raise NotFoundError("Call not found")
        logger.info(f"Call {call_id} accepted by {user_id}")
        await self._publisher.to_users(
            call.participants,
            OutboundEvent.CALL_ACCEPTED,
            {"callId": call.id, "userId": user_id, "callData": call},
        )
        return call

    async def reject_call(self, user_id: str, call_id: str) -> Call:
        """Decline a call. The call is torn down for everyone."""
        call = await self._get_call_for_member(user_id, call_id)
        removed = await self._call_repo.delete(call_id)
        if not removed:
            raise NotFoundError("Call not found")
        logger.info(f"Call {call_id} rejected by {user_id}")
        await self._publisher.to_users(
            [*removed.participants, user_id],
            OutboundEvent.CALL_REJECTED,
            {"callId": call.id, "userId": user_id},
        )
        return removed

    async def end_call(self, user_id: str, call_id: str) -> int:
        """
        Hang up a call in any state.

        Returns:
            Call duration in whole seconds.
        """
        await self._get_call_for_member(user_id, call_id)
        removed = await self._call_repo.delete(call_id)
        if not removed:
            raise NotFoundError("Call not found")
        duration = elapsed_seconds(removed.start_time, now_utc())
        logger.info(f"Call {call_id} ended by {user_id} after {duration}s")
        recipients = [*removed.participants, user_id]
        if removed.status == CallStatus.CALLING:
            # callees are still ringing
            chat = await self._chat_repo.get(removed.chat_id)
            if chat:
                recipients = chat.participants
        await self._publisher.to_users(
            recipients,
            OutboundEvent.CALL_ENDED,
            {"callId": removed.id, "duration": duration, "reason": END_REASON_HANGUP},
        )
        return duration

    async def expire_unanswered(self, now: Optional[datetime] = None) -> list[str]:
        """
        End calls that kept ringing past CALL_RING_TIMEOUT_SECONDS.

        Everyone in the chat is told, so callees stop ringing too.

        Returns:
            IDs of the expired calls.
        """
        timeout = self._settings.CALL_RING_TIMEOUT_SECONDS
        if timeout <= 0:
            return []
        now = now or now_utc()
        cutoff = now - timedelta(seconds=timeout)

        expired = []
        for call in await self._call_repo.list():
            if call.status != CallStatus.CALLING or call.start_time > cutoff:
                continue
            removed = await self._call_repo.delete(call.id)
            if not removed:
                continue
            chat = await self._chat_repo.get(removed.chat_id)
            recipients = chat.participants if chat else removed.participants
            await self._publisher.to_users(
                recipients,
                OutboundEvent.CALL_ENDED,
                {
                    "callId": removed.id,
                    "duration": elapsed_seconds(removed.start_time, now),
                    "reason": END_REASON_TIMEOUT,
                },
            )
            expired.append(removed.id)

        if expired:
            logger.info(f"Expired {len(expired)} unanswered call(s)")
        return expired

    async def _get_call_for_member(self, user_id: str, call_id: str) -> Call:
        call = await self._call_repo.get(call_id)
        if not call:
            raise NotFoundError("Call not found")
        if user_id in call.participants:
            return call
        chat = await self._chat_repo.get(call.chat_id)
        if not chat or not chat.has_participant(user_id):
            raise ForbiddenError("No access to this call")
        return call
