"""API routers."""

from chatcore.api import (
    chats,
    friends,
    realtime,
    users,
)

__all__ = [
    "chats",
    "friends",
    "realtime",
    "users",
]
