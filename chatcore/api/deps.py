"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from chatcore.core.config import get_settings
from chatcore.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ChatCoreError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from chatcore.interfaces.auth_provider import AuthUser, IAuthProvider
from chatcore.interfaces.call_repository import ICallRepository
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.user import User
from chatcore.services.call_service import CallService
from chatcore.services.chat_service import ChatService
from chatcore.services.friend_service import FriendService
from chatcore.services.gateway import EventGateway
from chatcore.services.message_service import MessageService
from chatcore.services.presence_service import PresenceService
from chatcore.services.realtime_service import EventPublisher, RealtimeManager
from chatcore.services.user_service import UserService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_user_repository() -> IUserRepository:
    """Get user directory instance."""
    from chatcore.infrastructure.local.user_repository import InMemoryUserRepository
    return InMemoryUserRepository()


@lru_cache()
def get_session_registry() -> ISessionRegistry:
    """Get session registry instance."""
    from chatcore.infrastructure.local.session_registry import InMemorySessionRegistry
    return InMemorySessionRegistry()


@lru_cache()
def get_friend_repository() -> IFriendRepository:
    """Get friend graph instance."""
    from chatcore.infrastructure.local.friend_repository import InMemoryFriendRepository
    return InMemoryFriendRepository()


@lru_cache()
def get_chat_repository() -> IChatRepository:
    """Get chat store instance."""
    from chatcore.infrastructure.local.chat_repository import InMemoryChatRepository
    settings = get_settings()
    return InMemoryChatRepository(
        history_limit=settings.MESSAGE_HISTORY_LIMIT,
        history_retain=settings.MESSAGE_HISTORY_RETAIN,
    )


@lru_cache()
def get_call_repository() -> ICallRepository:
    """Get live call store instance."""
    from chatcore.infrastructure.local.call_repository import InMemoryCallRepository
    return InMemoryCallRepository()


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "local":
        from chatcore.infrastructure.auth.local_auth import LocalAuthProvider

        return LocalAuthProvider(settings)

    from chatcore.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=settings.AUTH_PROVIDER != "none")


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_realtime_manager() -> RealtimeManager:
    return RealtimeManager()


@lru_cache()
def get_event_publisher() -> EventPublisher:
    return EventPublisher(get_session_registry(), get_realtime_manager())


@lru_cache()
def get_user_service() -> UserService:
    return UserService(get_user_repository(), get_friend_repository())


@lru_cache()
def get_presence_service() -> PresenceService:
    return PresenceService(
        sessions=get_session_registry(),
        user_repo=get_user_repository(),
        friend_repo=get_friend_repository(),
        publisher=get_event_publisher(),
    )


@lru_cache()
def get_chat_service() -> ChatService:
    return ChatService(
        chat_repo=get_chat_repository(),
        user_repo=get_user_repository(),
        publisher=get_event_publisher(),
    )


@lru_cache()
def get_message_service() -> MessageService:
    return MessageService(
        chat_repo=get_chat_repository(),
        user_repo=get_user_repository(),
        publisher=get_event_publisher(),
    )


@lru_cache()
def get_friend_service() -> FriendService:
    return FriendService(
        friend_repo=get_friend_repository(),
        user_repo=get_user_repository(),
        sessions=get_session_registry(),
        chat_service=get_chat_service(),
        publisher=get_event_publisher(),
    )


@lru_cache()
def get_call_service() -> CallService:
    return CallService(
        call_repo=get_call_repository(),
        chat_repo=get_chat_repository(),
        user_repo=get_user_repository(),
        publisher=get_event_publisher(),
    )


@lru_cache()
def get_event_gateway() -> EventGateway:
    return EventGateway(
        auth_provider=get_auth_provider(),
        sessions=get_session_registry(),
        publisher=get_event_publisher(),
        user_service=get_user_service(),
        presence_service=get_presence_service(),
        friend_service=get_friend_service(),
        chat_service=get_chat_service(),
        message_service=get_message_service(),
        call_service=get_call_service(),
    )


def reset_dependencies() -> None:
    """Drop every cached instance so the next request starts from empty stores."""
    for getter in (
        get_user_repository,
        get_session_registry,
        get_friend_repository,
        get_chat_repository,
        get_call_repository,
        get_auth_provider,
        get_realtime_manager,
        get_event_publisher,
        get_user_service,
        get_presence_service,
        get_chat_service,
        get_message_service,
        get_friend_service,
        get_call_service,
        get_event_gateway,
    ):
        getter.cache_clear()


# ===========================================
# Error Translation
# ===========================================


def to_http_exception(exc: ChatCoreError) -> HTTPException:
    """Map a service error to the matching HTTP status."""
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AuthorizationError):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, AuthenticationError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=exc.message)


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """
    Get current authenticated user.

    The verified identity is provisioned in the user directory on first use.
    With authentication disabled, a fixed developer identity is used.
    """
    if not auth_provider.is_enabled():
        return await user_service.ensure_user(
            AuthUser(id="dev_user", email="dev@example.com", name="Developer")
        )

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        identity = await auth_provider.verify_token(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        )
    try:
        return await user_service.ensure_user(identity)
    except ChatCoreError as e:
        raise to_http_exception(e)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

UserRepo = Annotated[IUserRepository, Depends(get_user_repository)]
SessionRegistry = Annotated[ISessionRegistry, Depends(get_session_registry)]
ChatRepo = Annotated[IChatRepository, Depends(get_chat_repository)]
CallRepo = Annotated[ICallRepository, Depends(get_call_repository)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FriendServiceDep = Annotated[FriendService, Depends(get_friend_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
