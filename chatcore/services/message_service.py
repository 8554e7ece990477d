"""
Message routing.

Stores a message in its chat and delivers it to the other participants:
live recipients get ``new_message``, offline ones an unread increment.
"""

from typing import Optional

from chatcore.core.config import Settings, get_settings
from chatcore.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from chatcore.core.logger import logger
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.chat import Message
from chatcore.models.events import OutboundEvent
from chatcore.services.chat_service import build_message
from chatcore.services.realtime_service import EventPublisher


class MessageService:
    def __init__(
        self,
        chat_repo: IChatRepository,
        user_repo: IUserRepository,
        publisher: EventPublisher,
        settings: Optional[Settings] = None,
    ):
        self._chat_repo = chat_repo
        self._user_repo = user_repo
        self._publisher = publisher
        self._settings = settings or get_settings()

    async def send_message(self, sender_id: str, chat_id: str, text: str) -> Message:
        """
        Append a message and route it.

        The sender is not echoed; callers acknowledge it themselves.

        Raises:
            ValidationError: empty or oversized text
            NotFoundError: unknown chat or sender
            ForbiddenError: sender is not a participant
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message text is required")
        if len(text) > self._settings.MAX_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message text exceeds {self._settings.MAX_MESSAGE_LENGTH} characters"
            )

        chat = await self._chat_repo.get(chat_id)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")
        if not chat.has_participant(sender_id):
            raise ForbiddenError("No access to this chat")
        sender = await self._user_repo.get(sender_id)
        if not sender:
            raise NotFoundError(f"User {sender_id} not found")

        message = build_message(chat_id, sender, text)
        chat = await self._chat_repo.append_message(chat_id, message)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")

        recipients = [p for p in chat.participants if p != sender_id]
        reached = await self._publisher.to_users(
            recipients,
            OutboundEvent.NEW_MESSAGE,
            {"chatId": chat_id, "message": message},
        )
        for recipient_id in recipients:
            if recipient_id not in reached:
                await self._chat_repo.increment_unread(chat_id, 1)

        logger.debug(
            f"Message {message.id} in chat {chat_id}: "
            f"{len(reached)} delivered, {len(recipients) - len(reached)} unread"
        )
        return message
