# Руководство к файлу (TESTS/unit/test_account_request_unit.py)
# Назначение:
# - Unit-тесты SERVICES/account_request_service.py: уникальность логина,
#   одобрение (пользователь + приветственный чат) и отклонение заявок,
#   конфликт логина, занятого между подачей и одобрением.

from __future__ import annotations

import pytest

from PROCHECK.CORE.errors import ConflictError, InvalidStateError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import AccountRequestStatus, UserRole
from PROCHECK.SERVICES import account_request_service, auth_service, chat_service, user_service
from PROCHECK.SERVICES.account_request_service import WELCOME_TEXT
from PROCHECK.SERVICES.security import verify_password


@pytest.mark.asyncio
async def test_submit_stores_hashed_password(session):
    req = await account_request_service.submit(session, "newbie", "s3cret", "inspector", "Хочу проверять")

    assert req.status == AccountRequestStatus.PENDING.value
    assert req.role == UserRole.INSPECTOR.value
    assert req.password_hash != "s3cret"
    assert verify_password("s3cret", req.password_hash)


@pytest.mark.asyncio
async def test_username_must_be_unique_across_users_and_pending_requests(session):
    await account_request_service.submit(session, "newbie", "pw", "customer", "")

    with pytest.raises(ConflictError):
        await account_request_service.submit(session, "  NEWBIE ", "pw", "customer", "")
    with pytest.raises(ConflictError):
        await account_request_service.submit(session, "Zakaz", "pw", "customer", "")


@pytest.mark.asyncio
async def test_submit_validates_input(session):
    with pytest.raises(ValidationFailedError):
        await account_request_service.submit(session, "  ", "pw", "customer", "")
    with pytest.raises(ValidationFailedError):
        await account_request_service.submit(session, "someone", "pw", "superuser", "")


@pytest.mark.asyncio
async def test_approve_creates_user_and_welcome_chat(session, actors):
    req = await account_request_service.submit(session, "newbie", "s3cret", "inspector", "")

    user = await account_request_service.approve(session, req.id, actors["admin"])

    assert user.username == "newbie"
    assert user.full_name == "newbie"
    assert user.role == UserRole.INSPECTOR.value
    assert await auth_service.login(session, "newbie", "s3cret")

    reviewed = await account_request_service.get_request(session, req.id)
    assert reviewed.status == AccountRequestStatus.APPROVED.value
    assert reviewed.reviewed_by == actors["admin"].id
    assert reviewed.reviewed_at is not None

    chats = await chat_service.list_chats_for(session, user.id)
    assert [c.title for c in chats] == ["Чат с администратором (newbie)"]
    assert [(m.author_id, m.text) for m in chats[0].messages] == [(actors["admin"].id, WELCOME_TEXT)]


@pytest.mark.asyncio
async def test_request_is_reviewed_once(session, actors):
    req = await account_request_service.submit(session, "newbie", "pw", "customer", "")
    await account_request_service.reject(session, req.id, actors["admin"])

    with pytest.raises(InvalidStateError):
        await account_request_service.approve(session, req.id, actors["admin"])
    with pytest.raises(InvalidStateError):
        await account_request_service.reject(session, req.id, actors["admin"])

    # После отклонения логин снова свободен
    again = await account_request_service.submit(session, "newbie", "pw", "customer", "")
    assert again.id != req.id


@pytest.mark.asyncio
async def test_only_admin_reviews_requests(session, actors):
    req = await account_request_service.submit(session, "newbie", "pw", "customer", "")

    with pytest.raises(UnauthorizedError):
        await account_request_service.approve(session, req.id, actors["senior"])
    with pytest.raises(UnauthorizedError):
        await account_request_service.list_requests(session, actors["customer"])


@pytest.mark.asyncio
async def test_list_requests_filters_by_status(session, actors):
    first = await account_request_service.submit(session, "first", "pw", "customer", "")
    second = await account_request_service.submit(session, "second", "pw", "customer", "")
    await account_request_service.reject(session, first.id, actors["admin"])

    pending = await account_request_service.list_requests(session, actors["admin"], "pending")
    assert [r.id for r in pending] == [second.id]
    everything = await account_request_service.list_requests(session, actors["admin"])
    assert {r.id for r in everything} == {first.id, second.id}

    with pytest.raises(ValidationFailedError):
        await account_request_service.list_requests(session, actors["admin"], "lost")


@pytest.mark.asyncio
async def test_pending_cyrillic_username_blocks_other_case(session):
    await account_request_service.submit(session, "Пётр", "pw", "customer", "")

    with pytest.raises(ConflictError):
        await account_request_service.submit(session, "пётр", "pw", "customer", "")
    with pytest.raises(ConflictError):
        await account_request_service.submit(session, " ПЁТР", "pw", "inspector", "")


@pytest.mark.asyncio
async def test_approve_conflicts_when_username_was_claimed_meanwhile(session, actors):
    req = await account_request_service.submit(session, "Ольга", "pw", "customer", "")
    await user_service.create_user(
        session, actors["admin"], username="ольга", password="other", role="inspector", full_name="Ольга Иванова"
    )
    users_before = {u.id for u in await user_service.list_users(session)}

    with pytest.raises(ConflictError):
        await account_request_service.approve(session, req.id, actors["admin"])

    assert {u.id for u in await user_service.list_users(session)} == users_before
    still_pending = await account_request_service.get_request(session, req.id)
    assert still_pending.status == AccountRequestStatus.PENDING.value
