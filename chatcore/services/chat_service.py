"""
Chat management service.

Creates chats (explicitly or as a side effect of a new friendship), serves
history and builds per-viewer chat listings.
"""

from typing import Optional
from uuid import uuid4

from chatcore.core.config import Settings, get_settings
from chatcore.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from chatcore.core.logger import logger
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.chat import (
    Chat,
    ChatCreate,
    ChatSummary,
    ChatType,
    Message,
    ParticipantCard,
)
from chatcore.models.events import OutboundEvent
from chatcore.models.user import User
from chatcore.services.realtime_service import EventPublisher
from chatcore.utils.datetime_utils import now_utc

GREETING_TEMPLATE = "Hi! I'm {name}. Let's chat!"


def build_message(chat_id: str, sender: User, text: str) -> Message:
    """New message authored by ``sender`` with a fresh id and the current time."""
    return Message(
        id=str(uuid4()),
        chat_id=chat_id,
        sender_id=sender.id,
        sender_name=sender.name,
        sender_avatar=sender.avatar,
        text=text,
        timestamp=now_utc(),
    )


def summarize_chat(chat: Chat, viewer_id: str, users: dict[str, User]) -> ChatSummary:
    """
    Chat as seen by one participant.

    Private chats are shown under the other participant's name.
    """
    name = chat.name
    if chat.type == ChatType.PRIVATE:
        peers = [users[p] for p in chat.participants if p != viewer_id and p in users]
        if peers:
            name = peers[0].name
    return ChatSummary(
        id=chat.id,
        name=name,
        type=chat.type,
        participants=[
            ParticipantCard(id=users[p].id, name=users[p].name, avatar=users[p].avatar)
            for p in chat.participants
            if p in users
        ],
        last_message=chat.last_message,
        unread_count=chat.unread_count,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


class ChatService:
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

    async def get_chat_for_member(self, user_id: str, chat_id: str) -> Chat:
        """
        Load a chat the user participates in.

        Raises:
            NotFoundError: unknown chat
            ForbiddenError: user is not a participant
        """
        chat = await self._chat_repo.get(chat_id)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")
        if not chat.has_participant(user_id):
            raise ForbiddenError("No access to this chat")
        return chat

    async def create_chat(
        self,
        creator_id: str,
        participant_ids: list[str],
        name: Optional[str] = None,
    ) -> Chat:
        """
        Create a chat between the creator and the given users.

        Participants are deduplicated keeping first-seen order; the chat is a
        group when more than two members remain. Without a name the chat is
        called after everyone except the creator.

        Raises:
            ValidationError: participant ids are not a list of strings
            NotFoundError: a participant does not exist
            ChatAlreadyExistsError: a chat with the same members exists
        """
        if not isinstance(participant_ids, list) or not all(
            isinstance(p, str) and p for p in participant_ids
        ):
            raise ValidationError("participantIds must be a list of user ids")

        participants = list(dict.fromkeys([creator_id, *participant_ids]))
        users = await self._user_repo.get_many(participants)
        for participant_id in participants:
            if participant_id not in users:
                raise NotFoundError(f"User {participant_id} not found")

        chat_name = (name or "").strip() or ", ".join(
            users[p].name for p in participants if p != creator_id
        )
        if not chat_name:
            chat_name = users[creator_id].name

        chat = await self._chat_repo.create(ChatCreate(name=chat_name, participants=participants))
        logger.info(f"Chat {chat.id} created by {creator_id} ({chat.type.value}, {len(participants)} members)")
        await self._announce(chat, users)
        return chat

    async def create_or_get_private_chat(self, initiator_id: str, peer_id: str) -> tuple[Chat, bool]:
        """
        Private chat between two users, created on first use.

        A new chat is named after the peer and seeded with a greeting from
        the initiator.

        Returns:
            (chat, created)
        """
        existing = await self._chat_repo.find_by_participants([initiator_id, peer_id])
        if existing:
            return existing, False

        users = await self._user_repo.get_many([initiator_id, peer_id])
        if initiator_id not in users or peer_id not in users:
            raise NotFoundError("User not found")
        initiator = users[initiator_id]
        greeting = build_message("", initiator, GREETING_TEMPLATE.format(name=initiator.name))
        chat = await self._chat_repo.create(
            ChatCreate(
                name=users[peer_id].name,
                participants=[initiator_id, peer_id],
                messages=[greeting],
            )
        )
        await self._announce(chat, users)
        return chat, True

    async def read_messages(
        self,
        user_id: str,
        chat_id: str,
        limit: Optional[int] = None,
    ) -> list[Message]:
        """Newest messages of a chat; reading clears its unread counter."""
        await self.get_chat_for_member(user_id, chat_id)
        await self._chat_repo.mark_read(chat_id)
        return await self._chat_repo.get_messages(chat_id, limit or self._settings.MESSAGE_PAGE_SIZE)

    async def list_chats(self, user_id: str) -> list[ChatSummary]:
        chats = await self._chat_repo.list_for_user(user_id)
        member_ids = list(dict.fromkeys(p for chat in chats for p in chat.participants))
        users = await self._user_repo.get_many(member_ids)
        return [summarize_chat(chat, user_id, users) for chat in chats]

    async def _announce(self, chat: Chat, users: dict[str, User]) -> None:
        for participant_id in chat.participants:
            await self._publisher.to_user(
                participant_id,
                OutboundEvent.CHAT_CREATED,
                {"chat": summarize_chat(chat, participant_id, users)},
            )
