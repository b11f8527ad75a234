# Руководство к файлу (TESTS/unit/test_chat_unit.py)
# Назначение:
# - Unit-тесты SERVICES/chat_service.py: дедупликация по набору участников,
#   скрытие чата для одного пользователя, удаление для всех, сообщения.

from __future__ import annotations

import pytest

from PROCHECK.CORE.errors import NotFoundError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import ChatDeleteScope
from PROCHECK.DATABASE.CACHE_MANAGER import ChatManager
from PROCHECK.DATABASE.CACHE_MANAGER.chat import participant_set
from PROCHECK.SERVICES import chat_service
from PROCHECK.SERVICES.chat_service import DEFAULT_CHAT_TITLE


CUSTOMER_ID = "user-customer"
INSPECTOR_ID = "user-inspector"
SENIOR_ID = "user-senior"


@pytest.mark.asyncio
async def test_chat_is_deduplicated_by_participant_set(session):
    first = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])
    second = await chat_service.get_or_create_chat(session, [INSPECTOR_ID, CUSTOMER_ID, CUSTOMER_ID], "Другой заголовок")

    assert second.id == first.id
    assert first.title == DEFAULT_CHAT_TITLE
    assert participant_set(first) == {CUSTOMER_ID, INSPECTOR_ID}

    trio = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID, SENIOR_ID], "Группа")
    assert trio.id != first.id
    assert trio.title == "Группа"


@pytest.mark.asyncio
async def test_chat_requires_two_existing_participants(session):
    with pytest.raises(ValidationFailedError):
        await chat_service.get_or_create_chat(session, [CUSTOMER_ID, CUSTOMER_ID])
    with pytest.raises(NotFoundError):
        await chat_service.get_or_create_chat(session, [CUSTOMER_ID, "user-ghost"])


@pytest.mark.asyncio
async def test_self_delete_hides_only_for_that_user(session):
    chat = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])

    await chat_service.delete_chat(session, chat.id, CUSTOMER_ID, ChatDeleteScope.SELF)
    await chat_service.delete_chat(session, chat.id, CUSTOMER_ID, "self")

    customer_chats = [c.id for c in await chat_service.list_chats_for(session, CUSTOMER_ID)]
    inspector_chats = [c.id for c in await chat_service.list_chats_for(session, INSPECTOR_ID)]
    assert chat.id not in customer_chats
    assert chat.id in inspector_chats

    reloaded = await ChatManager(session).require_chat(chat.id)
    assert len(reloaded.hidden_for) == 1


@pytest.mark.asyncio
async def test_writing_a_message_unhides_chat_for_author(session):
    chat = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])
    await chat_service.delete_chat(session, chat.id, CUSTOMER_ID, ChatDeleteScope.SELF)

    message = await chat_service.add_message(session, chat.id, CUSTOMER_ID, "Снова здесь")

    assert message.author_id == CUSTOMER_ID
    assert chat.id in [c.id for c in await chat_service.list_chats_for(session, CUSTOMER_ID)]


@pytest.mark.asyncio
async def test_delete_for_all_removes_chat_and_messages(session):
    chat = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])
    message = await chat_service.add_message(session, chat.id, INSPECTOR_ID, "Привет")

    await chat_service.delete_chat(session, chat.id, INSPECTOR_ID, ChatDeleteScope.ALL)

    with pytest.raises(NotFoundError):
        await ChatManager(session).require_chat(chat.id)
    with pytest.raises(NotFoundError):
        await chat_service.get_message(session, message.id)


@pytest.mark.asyncio
async def test_messages_are_ordered_edited_and_deleted(session):
    chat = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])
    first = await chat_service.add_message(session, chat.id, CUSTOMER_ID, "Первое")
    second = await chat_service.add_message(session, chat.id, INSPECTOR_ID, "Второе")

    edited = await chat_service.update_message(session, first.id, "Первое (исправлено)")
    assert edited.text == "Первое (исправлено)"

    await chat_service.delete_message(session, second.id)
    reloaded = await ChatManager(session).require_chat(chat.id)
    assert [m.text for m in reloaded.messages] == ["Первое (исправлено)"]

    with pytest.raises(ValidationFailedError):
        await chat_service.add_message(session, chat.id, CUSTOMER_ID, "   ")
    with pytest.raises(ValidationFailedError):
        await chat_service.update_message(session, first.id, "")


@pytest.mark.asyncio
async def test_outsider_cannot_open_chat(session, actors):
    chat = await chat_service.get_or_create_chat(session, [CUSTOMER_ID, INSPECTOR_ID])

    with pytest.raises(UnauthorizedError):
        await chat_service.get_chat_for(session, actors["senior"], chat.id)
    opened = await chat_service.get_chat_for(session, actors["customer"], chat.id)
    assert opened.id == chat.id


@pytest.mark.asyncio
async def test_default_users_have_admin_chats(session):
    chats = await chat_service.list_chats_for(session, CUSTOMER_ID)

    assert [c.title for c in chats] == ["Чат с администратором (ООО «ТехПро»)"]
    assert chats[0].messages[0].author_id == "user-admin"
