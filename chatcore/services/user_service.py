"""
User directory service.

Provisions directory entries for verified identities and powers user search.
"""

from typing import Optional

from chatcore.core.config import Settings, get_settings
from chatcore.interfaces.auth_provider import AuthUser
from chatcore.interfaces.friend_repository import IFriendRepository
from chatcore.interfaces.user_repository import IUserRepository
from chatcore.models.user import User, UserCreate, UserSearchResult


def identity_to_user_create(identity: AuthUser) -> UserCreate:
    """Fill in display name and e-mail for identities that lack them."""
    email = identity.email or f"{identity.id}@example.com"
    name = identity.name or email.split("@", 1)[0] or identity.id
    return UserCreate(id=identity.id, name=name, email=email)


class UserService:
    def __init__(
        self,
        user_repo: IUserRepository,
        friend_repo: IFriendRepository,
        settings: Optional[Settings] = None,
    ):
        self._user_repo = user_repo
        self._friend_repo = friend_repo
        self._settings = settings or get_settings()

    async def ensure_user(self, identity: AuthUser) -> User:
        """Return the directory entry for a verified identity, creating it on first sight."""
        return await self._user_repo.ensure(identity_to_user_create(identity))

    async def search(self, user_id: str, query: str) -> list[UserSearchResult]:
        """
        Search the directory by name or e-mail.

        Queries shorter than USER_SEARCH_MIN_LENGTH return nothing; the
        caller is never part of the results.
        """
        query = (query or "").strip()
        if len(query) < self._settings.USER_SEARCH_MIN_LENGTH:
            return []
        users = await self._user_repo.search(
            query,
            exclude_user_id=user_id,
            limit=self._settings.USER_SEARCH_LIMIT,
        )
        results = []
        for user in users:
            is_friend = await self._friend_repo.are_friends(user_id, user.id)
            pending = await self._friend_repo.find_pending(user_id, user.id)
            results.append(
                UserSearchResult(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    avatar=user.avatar,
                    status=user.status,
                    last_seen=user.last_seen,
                    is_friend=is_friend,
                    has_pending_request=pending is not None,
                )
            )
        return results
