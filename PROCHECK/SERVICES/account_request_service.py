"""Руководство к файлу (PROCHECK/SERVICES/account_request_service.py)
Назначение:
- Заявки на аккаунт: подача без авторизации, одобрение (пользователь + приветственный чат)
  и отклонение администратором.
Важно:
- pending -> approved и pending -> rejected терминальны.
- Пароль заявителя хранится только в виде хэша и никогда не отдаётся наружу.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import ConflictError, InvalidStateError, ValidationFailedError
from PROCHECK.CORE.types import AccountRequestStatus, UserRole
from PROCHECK.DATABASE.CACHE_MANAGER import AccountRequestManager, UserManager
from PROCHECK.DATABASE.models import AccountRequest, User
from . import chat_service
from .policy import require_role
from .security import hash_password
from .user_service import parse_role


logger = logging.getLogger("procheck.account_requests")

WELCOME_TEXT = (
    "Добро пожаловать в ProCheck! Ваш аккаунт был создан. "
    "Вы можете обратиться ко мне за помощью в этом чате."
)


async def submit(session: AsyncSession, username: str, password: str, role: str, purpose: str) -> AccountRequest:
    if not (username or "").strip() or not password:
        raise ValidationFailedError("Логин и пароль обязательны")
    role_value = parse_role(role).value

    if await UserManager(session).get_user_by_username(username) is not None:
        logger.warning("Account request rejected: username %r is taken", username)
        raise ConflictError("Пользователь с таким логином уже существует")

    requests = AccountRequestManager(session)
    if await requests.find_pending_by_username(username) is not None:
        logger.warning("Account request rejected: pending request for %r exists", username)
        raise ConflictError("Запрос с таким логином уже существует")

    req = await requests.create_request(
        username=username,
        password_hash=hash_password(password),
        role=role_value,
        purpose=purpose,
    )
    logger.info("Account request %s submitted for %r (%s)", req.id, req.username, role_value)
    return req


async def _require_pending(requests: AccountRequestManager, request_id: str) -> AccountRequest:
    req = await requests.require(AccountRequest, request_id)
    if req.status != AccountRequestStatus.PENDING.value:
        raise InvalidStateError(f"Заявка {request_id} уже обработана ({req.status})")
    return req


async def approve(session: AsyncSession, request_id: str, admin: User) -> User:
    """Одобрить заявку: создать пользователя и чат с администратором.

    Возвращает созданного пользователя.
    """

    require_role(admin, UserRole.ADMIN)
    requests = AccountRequestManager(session)
    req = await _require_pending(requests, request_id)

    users = UserManager(session)
    if await users.get_user_by_username(req.username) is not None:
        logger.warning("Approve of %s failed: username %r was claimed", request_id, req.username)
        raise ConflictError("Пользователь с таким логином уже существует")

    user = await users.create_user(
        username=req.username,
        password_hash=req.password_hash,
        role=req.role,
        full_name=req.username.strip(),
        profile={},
    )
    await requests.mark_reviewed(request_id, status=AccountRequestStatus.APPROVED.value, reviewer_id=admin.id)
    await chat_service.provision_welcome_chat(
        session,
        admin,
        user,
        title=f"Чат с администратором ({user.username})",
        text=WELCOME_TEXT,
    )
    logger.info("Account request %s approved by %s -> user %s", request_id, admin.id, user.id)
    return user


async def reject(session: AsyncSession, request_id: str, admin: User) -> AccountRequest:
    require_role(admin, UserRole.ADMIN)
    requests = AccountRequestManager(session)
    await _require_pending(requests, request_id)
    req = await requests.mark_reviewed(request_id, status=AccountRequestStatus.REJECTED.value, reviewer_id=admin.id)
    logger.info("Account request %s rejected by %s", request_id, admin.id)
    return req


async def get_request(session: AsyncSession, request_id: str) -> AccountRequest:
    return await AccountRequestManager(session).require(AccountRequest, request_id)


async def list_requests(session: AsyncSession, admin: User, status: Optional[str] = None) -> List[AccountRequest]:
    require_role(admin, UserRole.ADMIN)
    if status is not None:
        try:
            status = AccountRequestStatus(status).value
        except ValueError:
            raise ValidationFailedError(f"Неизвестный статус заявки: {status}")
    return await AccountRequestManager(session).list_requests(status)
