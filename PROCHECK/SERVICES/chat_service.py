"""Руководство к файлу (PROCHECK/SERVICES/chat_service.py)
Назначение:
- Чаты и сообщения: get-or-create по набору участников, сообщения, удаление
  «у себя» (скрытие) и «у всех» (полное удаление).
- Приветственный чат администратора как побочный эффект создания пользователя.
Важно:
- Повторное создание чата с тем же набором участников возвращает существующий чат,
  это не ошибка.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import NotFoundError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import ChatDeleteScope
from PROCHECK.DATABASE.CACHE_MANAGER import ChatManager, UserManager
from PROCHECK.DATABASE.CACHE_MANAGER.chat import participant_set
from PROCHECK.DATABASE.models import Chat, ChatMessage, User


logger = logging.getLogger("procheck.chats")

DEFAULT_CHAT_TITLE = "Новый чат"


def _unique(ids: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for uid in ids:
        if uid and uid not in seen:
            seen.append(uid)
    return seen


async def get_or_create_chat(session: AsyncSession, participant_ids: Iterable[str], title: Optional[str] = None) -> Chat:
    """Вернуть чат с точно таким набором участников или создать новый."""

    ids = _unique(participant_ids)
    if len(ids) < 2:
        raise ValidationFailedError("В чате должно быть минимум два разных участника")

    users = UserManager(session)
    for uid in ids:
        if await users.get_user(uid) is None:
            raise NotFoundError("Пользователь", uid)

    mgr = ChatManager(session)
    existing = await mgr.find_by_participants(ids)
    if existing is not None:
        logger.debug("Chat for participants %s already exists: %s", ids, existing.id)
        return existing

    chat = await mgr.create_chat(ids, title if title is not None else DEFAULT_CHAT_TITLE)
    logger.info("Chat created id=%s participants=%s", chat.id, ids)
    return chat


async def provision_welcome_chat(session: AsyncSession, admin: User, user: User, *, title: str, text: str) -> Chat:
    """Служебный чат администратора с новым пользователем и одним сообщением от администратора."""

    chat = await get_or_create_chat(session, [admin.id, user.id], title)
    await ChatManager(session).add_message(chat.id, author_id=admin.id, text=text)
    return chat


async def get_chat_for(session: AsyncSession, actor: User, chat_id: str) -> Chat:
    chat = await ChatManager(session).require_chat(chat_id)
    if actor.id not in participant_set(chat):
        raise UnauthorizedError("Вы не участник этого чата")
    return chat


async def list_chats_for(session: AsyncSession, user_id: str) -> List[Chat]:
    return await ChatManager(session).list_visible_for(user_id)


async def add_message(session: AsyncSession, chat_id: str, author_id: str, text: str) -> ChatMessage:
    if not (text or "").strip():
        raise ValidationFailedError("Пустое сообщение")
    message = await ChatManager(session).add_message(chat_id, author_id=author_id, text=text)
    logger.info("Message %s added to chat %s by %s", message.id, chat_id, author_id)
    return message


async def get_message(session: AsyncSession, message_id: str) -> ChatMessage:
    return await ChatManager(session).require(ChatMessage, message_id)


async def update_message(session: AsyncSession, message_id: str, text: str) -> ChatMessage:
    if not (text or "").strip():
        raise ValidationFailedError("Пустое сообщение")
    return await ChatManager(session).update_message(message_id, text)


async def delete_message(session: AsyncSession, message_id: str) -> None:
    await ChatManager(session).delete_message(message_id)
    logger.info("Message %s deleted", message_id)


async def delete_chat(session: AsyncSession, chat_id: str, user_id: str, scope: ChatDeleteScope | str) -> None:
    """scope=self скрывает чат только для user_id; scope=all удаляет чат целиком."""

    scope = ChatDeleteScope(scope)
    mgr = ChatManager(session)
    if scope is ChatDeleteScope.ALL:
        await mgr.delete_chat(chat_id)
        logger.info("Chat %s deleted for all by %s", chat_id, user_id)
    else:
        await mgr.hide_for(chat_id, user_id)
        logger.info("Chat %s hidden for %s", chat_id, user_id)
