"""
Friend list and friend request endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from chatcore.api.deps import CurrentUser, FriendServiceDep, to_http_exception
from chatcore.core.exceptions import ChatCoreError
from chatcore.models.base import CamelModel
from chatcore.models.friend import Friend, FriendRequest, PendingFriendRequest

router = APIRouter()


class FriendRequestCreate(CamelModel):
    friend_email: str


class FriendRequestAccepted(CamelModel):
    request_id: str
    friend_id: str
    chat_id: str


class FriendRemoved(CamelModel):
    friend_id: str
    removed: bool


@router.get("", response_model=list[Friend], response_model_by_alias=True)
async def list_friends(user: CurrentUser, friend_service: FriendServiceDep) -> list[Friend]:
    return await friend_service.list_friends(user.id)


@router.post("/request", response_model=FriendRequest, response_model_by_alias=True)
async def send_friend_request(
    body: FriendRequestCreate,
    user: CurrentUser,
    friend_service: FriendServiceDep,
) -> FriendRequest:
    """Send a friend request to the user with the given e-mail."""
    try:
        return await friend_service.send_request_by_email(user.id, body.friend_email)
    except ChatCoreError as e:
        raise to_http_exception(e)


@router.get("/requests", response_model=list[PendingFriendRequest], response_model_by_alias=True)
async def list_friend_requests(
    user: CurrentUser,
    friend_service: FriendServiceDep,
) -> list[PendingFriendRequest]:
    """Pending requests addressed to the current user."""
    return await friend_service.list_pending_requests(user.id)


@router.post(
    "/requests/{request_id}/accept",
    response_model=FriendRequestAccepted,
    response_model_by_alias=True,
)
async def accept_friend_request(
    request_id: str,
    user: CurrentUser,
    friend_service: FriendServiceDep,
) -> FriendRequestAccepted:
    try:
        result = await friend_service.accept_request(request_id, user.id)
    except ChatCoreError as e:
        raise to_http_exception(e)
    return FriendRequestAccepted(
        request_id=result.request.id,
        friend_id=result.request.from_user_id,
        chat_id=result.chat.id,
    )


@router.post(
    "/requests/{request_id}/reject",
    response_model=FriendRequest,
    response_model_by_alias=True,
)
async def reject_friend_request(
    request_id: str,
    user: CurrentUser,
    friend_service: FriendServiceDep,
) -> FriendRequest:
    try:
        return await friend_service.reject_request(request_id, user.id)
    except ChatCoreError as e:
        raise to_http_exception(e)


@router.delete("/{friend_id}", response_model=FriendRemoved, response_model_by_alias=True)
async def remove_friend(
    friend_id: str,
    user: CurrentUser,
    friend_service: FriendServiceDep,
) -> FriendRemoved:
    """Remove a friend. Shared chats are kept."""
    if friend_id == user.id:
        raise HTTPException(status_code=400, detail="Cannot remove yourself")
    removed = await friend_service.remove_friend(user.id, friend_id)
    return FriendRemoved(friend_id=friend_id, removed=removed)
