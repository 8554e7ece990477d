"""
Friend graph and friend request workflow.

Requests move pending -> accepted | rejected exactly once. Accepting one
creates the symmetric friendship and the private chat between the two users.
"""

from dataclasses import dataclass

from chatcore.core.exceptions import (
    AlreadyFriendsError,
    NotFoundError,
    ValidationError,
)
from chatcore.core.logger import logger
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.chat import Chat
from chatcore.models.events import OutboundEvent
from chatcore.models.friend import (
    Friend,
    FriendRequest,
    FriendRequestStatus,
    PendingFriendRequest,
)
from chatcore.models.user import UserSummary
from chatcore.services.chat_service import ChatService
from chatcore.services.realtime_service import EventPublisher
from chatcore.utils.datetime_utils import now_utc


@dataclass
class AcceptedFriendRequest:
    request: FriendRequest
    chat: Chat


class FriendService:
    def __init__(
        self,
        friend_repo: IFriendRepository,
        user_repo: IUserRepository,
        sessions: ISessionRegistry,
        chat_service: ChatService,
        publisher: EventPublisher,
    ):
        self._friend_repo = friend_repo
        self._user_repo = user_repo
        self._sessions = sessions
        self._chat_service = chat_service
        self._publisher = publisher

    async def send_request(self, from_user_id: str, to_user_id: str) -> FriendRequest:
        """
        Create a pending friend request and notify the recipient if connected.

        Raises:
            ValidationError: request to oneself
            NotFoundError: unknown sender or recipient
            AlreadyFriendsError: the users are already friends
            DuplicateRequestError: an identical pending request exists
        """
        if from_user_id == to_user_id:
            raise ValidationError("Cannot add yourself as a friend")
        users = await self._user_repo.get_many([from_user_id, to_user_id])
        if to_user_id not in users:
            raise NotFoundError("User not found")
        if from_user_id not in users:
            raise NotFoundError(f"User {from_user_id} not found")
        if await self._friend_repo.are_friends(from_user_id, to_user_id):
            raise AlreadyFriendsError("Already friends")

        request = await self._friend_repo.create_request(from_user_id, to_user_id)
        logger.info(f"Friend request {request.id}: {from_user_id} -> {to_user_id}")
        await self._publisher.to_user(
            to_user_id,
            OutboundEvent.FRIEND_REQUEST,
            {
                "requestId": request.id,
                "fromUser": UserSummary.from_user(users[from_user_id]),
                "createdAt": request.created_at,
            },
        )
        return request

    async def send_request_by_email(self, from_user_id: str, email: str) -> FriendRequest:
        email = (email or "").strip()
        if not email:
            raise ValidationError("friendEmail is required")
        target = await self._user_repo.get_by_email(email)
        if not target:
            raise NotFoundError("User not found")
        return await self.send_request(from_user_id, target.id)

    async def accept_request(self, request_id: str, user_id: str) -> AcceptedFriendRequest:
        """
        Accept a pending request addressed to ``user_id``.

        The private chat is created (or reused) with a greeting from the
        request sender, and the sender is told which chat to open.

        Raises:
            NotFoundError: no pending request with that id for this user
        """
        request = await self._friend_repo.resolve_request(
            request_id, user_id, FriendRequestStatus.ACCEPTED, now_utc()
        )
        if not request:
            raise NotFoundError("Friend request not found")

        await self._friend_repo.add_friendship(request.from_user_id, request.to_user_id)
        chat, created = await self._chat_service.create_or_get_private_chat(
            request.from_user_id, request.to_user_id
        )
        logger.info(
            f"Friend request {request.id} accepted; chat {chat.id} "
            f"{'created' if created else 'reused'}"
        )

        accepter = await self._user_repo.get(user_id)
        await self._publisher.to_user(
            request.from_user_id,
            OutboundEvent.FRIEND_REQUEST_ACCEPTED,
            {
                "requestId": request.id,
                "byUser": UserSummary.from_user(accepter) if accepter else None,
                "chatId": chat.id,
            },
        )
        return AcceptedFriendRequest(request=request, chat=chat)

    async def reject_request(self, request_id: str, user_id: str) -> FriendRequest:
        request = await self._friend_repo.resolve_request(
            request_id, user_id, FriendRequestStatus.REJECTED, now_utc()
        )
        if not request:
            raise NotFoundError("Friend request not found")
        logger.info(f"Friend request {request.id} rejected")
        return request

    async def remove_friend(self, user_id: str, friend_id: str) -> bool:
        """Drop the friendship in both directions. Chats are kept."""
        removed = await self._friend_repo.remove_friendship(user_id, friend_id)
        if removed:
            logger.info(f"Friendship removed: {user_id} <-> {friend_id}")
        return removed

    async def list_friends(self, user_id: str) -> list[Friend]:
        friend_ids = await self._friend_repo.list_friend_ids(user_id)
        users = await self._user_repo.get_many(friend_ids)
        friends = []
        for friend_id in friend_ids:
            user = users.get(friend_id)
            if not user:
                continue
            friends.append(
                Friend(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    avatar=user.avatar,
                    is_online=await self._sessions.is_online(user.id),
                    last_seen=user.last_seen,
                )
            )
        return friends

    async def list_pending_requests(self, user_id: str) -> list[PendingFriendRequest]:
        requests = await self._friend_repo.list_pending_for(user_id)
        senders = await self._user_repo.get_many([r.from_user_id for r in requests])
        return [
            PendingFriendRequest(
                id=request.id,
                from_user=UserSummary.from_user(senders[request.from_user_id]),
                created_at=request.created_at,
            )
            for request in requests
            if request.from_user_id in senders
        ]
