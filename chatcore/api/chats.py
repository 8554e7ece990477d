"""
Chat listing, creation and history endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from chatcore.api.deps import ChatServiceDep, CurrentUser, UserRepo, to_http_exception
from chatcore.core.exceptions import ChatCoreError
from chatcore.models.base import CamelModel
from chatcore.models.chat import ChatSummary, Message
from chatcore.services.chat_service import summarize_chat

router = APIRouter()


class ChatCreateRequest(CamelModel):
    participant_ids: list[str]
    name: Optional[str] = None


@router.get("", response_model=list[ChatSummary], response_model_by_alias=True)
async def list_chats(user: CurrentUser, chat_service: ChatServiceDep) -> list[ChatSummary]:
    """Chats of the current user, most recently active first."""
    return await chat_service.list_chats(user.id)


@router.post(
    "",
    response_model=ChatSummary,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_chat(
    body: ChatCreateRequest,
    user: CurrentUser,
    chat_service: ChatServiceDep,
    user_repo: UserRepo,
) -> ChatSummary:
    try:
        chat = await chat_service.create_chat(user.id, body.participant_ids, body.name)
    except ChatCoreError as e:
        raise to_http_exception(e)
    users = await user_repo.get_many(chat.participants)
    return summarize_chat(chat, user.id, users)


@router.get(
    "/{chat_id}/messages",
    response_model=list[Message],
    response_model_by_alias=True,
)
async def get_chat_messages(
    chat_id: str,
    user: CurrentUser,
    chat_service: ChatServiceDep,
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum messages"),
) -> list[Message]:
    """Newest messages of a chat. Reading resets its unread counter."""
    try:
        return await chat_service.read_messages(user.id, chat_id, limit)
    except ChatCoreError as e:
        raise to_http_exception(e)
