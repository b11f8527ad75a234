# Руководство к файлу (DATABASE/CACHE_MANAGER/chat.py)
# Назначение:
# - Менеджер чатов: поиск по точному набору участников, создание, сообщения,
#   скрытие чата для одного участника, полное удаление.
# Важно:
# - Правка/удаление сообщения не проверяет автора: это делает вызывающий слой.
# - Все изменения идут через коллекции Chat, чтобы объект в identity map был актуален.

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_class import BaseManager, generate_id
from ..models import Chat, ChatDeletedFor, ChatMessage, ChatParticipant, utcnow


def participant_set(chat: Chat) -> FrozenSet[str]:
    return frozenset(p.user_id for p in chat.participants)


def hidden_set(chat: Chat) -> FrozenSet[str]:
    return frozenset(h.user_id for h in chat.hidden_for)


class ChatManager(BaseManager):
    entity_name = "Чат"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def find_by_participants(self, user_ids: Iterable[str]) -> Optional[Chat]:
        wanted = frozenset(user_ids)
        if not wanted:
            return None
        # Кандидаты: чаты, где есть хотя бы один из участников; точное совпадение проверяем в Python
        some_id = next(iter(wanted))
        q = (
            select(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .where(ChatParticipant.user_id == some_id)
            .order_by(Chat.created_at)
        )
        res = await self.session.execute(q)
        for chat in res.scalars().unique().all():
            if participant_set(chat) == wanted:
                return chat
        return None

    async def create_chat(self, user_ids: Iterable[str], title: Optional[str]) -> Chat:
        chat_id = generate_id(Chat.ID_PREFIX)
        return await self.create(
            Chat,
            {
                "id": chat_id,
                "title": title,
                "created_at": utcnow(),
                "participants": [ChatParticipant(chat_id=chat_id, user_id=uid) for uid in user_ids],
                "messages": [],
                "hidden_for": [],
            },
        )

    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        return await self.get_by_id(Chat, chat_id)

    async def require_chat(self, chat_id: str) -> Chat:
        return await self.require(Chat, chat_id)

    async def list_visible_for(self, user_id: str) -> List[Chat]:
        """Чаты, где пользователь участник и которые он не скрыл у себя."""

        q = (
            select(Chat)
            .join(ChatParticipant, ChatParticipant.chat_id == Chat.id)
            .where(ChatParticipant.user_id == user_id)
            .order_by(Chat.created_at)
        )
        res = await self.session.execute(q)
        return [chat for chat in res.scalars().unique().all() if user_id not in hidden_set(chat)]

    async def list_chats(self) -> List[Chat]:
        res = await self.session.execute(select(Chat).order_by(Chat.created_at))
        return list(res.scalars().all())

    async def add_message(self, chat_id: str, *, author_id: str, text: str) -> ChatMessage:
        chat = await self.require_chat(chat_id)
        message = ChatMessage(
            id=generate_id(ChatMessage.ID_PREFIX),
            chat_id=chat.id,
            author_id=author_id,
            text=text,
            created_at=utcnow(),
        )
        chat.messages.append(message)
        # Автор снова видит чат, если скрывал его
        chat.hidden_for = [h for h in chat.hidden_for if h.user_id != author_id]
        await self.session.flush()
        return message

    async def get_message(self, message_id: str) -> Optional[ChatMessage]:
        return await self.get_by_id(ChatMessage, message_id)

    async def update_message(self, message_id: str, text: str) -> ChatMessage:
        msg = await self.require(ChatMessage, message_id)
        msg.text = text
        await self.session.flush()
        return msg

    async def delete_message(self, message_id: str) -> None:
        msg = await self.require(ChatMessage, message_id)
        chat = await self.require_chat(msg.chat_id)
        chat.messages = [m for m in chat.messages if m.id != message_id]
        await self.session.flush()

    async def hide_for(self, chat_id: str, user_id: str) -> Chat:
        chat = await self.require_chat(chat_id)
        if user_id not in hidden_set(chat):
            chat.hidden_for.append(ChatDeletedFor(chat_id=chat.id, user_id=user_id))
            await self.session.flush()
        return chat

    async def delete_chat(self, chat_id: str) -> None:
        await self.delete_by_id(Chat, chat_id)

    async def delete_all_messages(self) -> int:
        return await self.delete_where(ChatMessage)

    async def delete_all(self) -> int:
        return await self.delete_where(Chat)
