"""Abstract interfaces for infrastructure abstraction."""

from chatcore.interfaces.auth_provider import AuthUser, IAuthProvider
from chatcore.interfaces.call_repository import ICallRepository
from chatcore.interfaces.chat_repository import IChatRepository
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.interfaces.session_registry import ISessionRegistry
from chatcore.interfaces.user_repository import IUserRepository

__all__ = [
    "AuthUser",
    "IAuthProvider",
    "ICallRepository",
    "IChatRepository",
    "IFriendRepository",
    "ISessionRegistry",
    "IUserRepository",
]
