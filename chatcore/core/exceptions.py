"""
Custom exceptions for the application.

Every error carries a short machine-readable ``code`` which is what socket
clients receive in ``operation_failed`` acknowledgements.
"""

from typing import Any, Optional


class ChatCoreError(Exception):
    """Base exception for chatcore."""

    code = "error"

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ChatCoreError):
    """Missing or malformed input."""

    code = "validation_error"


class NotFoundError(ChatCoreError):
    """Resource not found."""

    code = "not_found"


class ConflictError(ChatCoreError):
    """Operation conflicts with existing state."""

    code = "conflict"


class AlreadyFriendsError(ConflictError):
    """The two users are already friends."""

    code = "already_friends"


class DuplicateRequestError(ConflictError):
    """A pending friend request for the same pair already exists."""

    code = "duplicate_request"


class ChatAlreadyExistsError(ConflictError):
    """A chat with exactly the same participants already exists."""

    code = "chat_exists"

    def __init__(self, message: str, chat_id: str):
        super().__init__(message, details={"chat_id": chat_id})
        self.chat_id = chat_id


class AuthenticationError(ChatCoreError):
    """Authentication failed."""

    code = "not_authenticated"


class AuthorizationError(ChatCoreError):
    """Authorization failed."""

    code = "forbidden"


class ForbiddenError(AuthorizationError):
    """Acting user is not a member of the target chat or call."""

    pass
