# Руководство к файлу (ROUTES/chats.py)
# Назначение:
# - Чаты и сообщения ProCheck.
# - Реализует: POST /chats, GET /chats, GET/DELETE /chats/{id},
#             POST /chats/{id}/messages, PATCH/DELETE /chats/{id}/messages/{message_id}.
# Важно:
# - Сервис сообщений не ограничивает автора; здесь правка и удаление разрешены только автору.
# - Текущий пользователь всегда добавляется в участники создаваемого чата.

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor
from ..schemas import ChatCreateRequest, ChatResponse, MessageRequest, MessageResponse, OkResponse
from PROCHECK.CORE.errors import NotFoundError, UnauthorizedError
from PROCHECK.CORE.types import ChatDeleteScope
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import Chat, ChatMessage, User
from PROCHECK.DATABASE.CACHE_MANAGER.chat import participant_set
from PROCHECK.SERVICES import chat_service


router = APIRouter(prefix="/chats", tags=["chats"])


def _chat_response(chat: Chat, with_messages: bool = True) -> ChatResponse:
    return ChatResponse(
        id=chat.id,
        title=chat.title,
        created_at=chat.created_at,
        participant_ids=sorted(participant_set(chat)),
        messages=[MessageResponse.model_validate(m) for m in chat.messages] if with_messages else [],
    )


async def _own_message(session: AsyncSession, actor: User, chat_id: str, message_id: str) -> ChatMessage:
    await chat_service.get_chat_for(session, actor, chat_id)
    message = await chat_service.get_message(session, message_id)
    if message.chat_id != chat_id:
        raise NotFoundError("Сообщение", message_id)
    if message.author_id != actor.id:
        raise UnauthorizedError("Менять сообщение может только автор")
    return message


@router.post("", response_model=ChatResponse)
async def create_chat(
    payload: ChatCreateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    chat = await chat_service.get_or_create_chat(session, [actor.id, *payload.participant_ids], payload.title)
    return _chat_response(chat)


@router.get("", response_model=List[ChatResponse])
async def list_chats(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    chats = await chat_service.list_chats_for(session, actor.id)
    return [_chat_response(c, with_messages=False) for c in chats]


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    chat = await chat_service.get_chat_for(session, actor, chat_id)
    return _chat_response(chat)


@router.post("/{chat_id}/messages", response_model=MessageResponse)
async def add_message(
    chat_id: str,
    payload: MessageRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await chat_service.get_chat_for(session, actor, chat_id)
    return await chat_service.add_message(session, chat_id, actor.id, payload.text)


@router.patch("/{chat_id}/messages/{message_id}", response_model=MessageResponse)
async def update_message(
    chat_id: str,
    message_id: str,
    payload: MessageRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await _own_message(session, actor, chat_id, message_id)
    return await chat_service.update_message(session, message_id, payload.text)


@router.delete("/{chat_id}/messages/{message_id}", response_model=OkResponse)
async def delete_message(
    chat_id: str,
    message_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await _own_message(session, actor, chat_id, message_id)
    await chat_service.delete_message(session, message_id)
    return OkResponse()


@router.delete("/{chat_id}", response_model=OkResponse)
async def delete_chat(
    chat_id: str,
    scope: ChatDeleteScope = ChatDeleteScope.SELF,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await chat_service.get_chat_for(session, actor, chat_id)
    await chat_service.delete_chat(session, chat_id, actor.id, scope)
    return OkResponse()
