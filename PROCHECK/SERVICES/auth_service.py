"""Руководство к файлу (PROCHECK/SERVICES/auth_service.py)
Назначение:
- Вход по логину/паролю и сохранённая сессия (current_user_id, last_login).
- Не зависит от FastAPI, работает только с AsyncSession и менеджерами БД.
Важно:
- Отсутствующий пользователь и неверный пароль дают одинаковую ошибку
  InvalidCredentialsError: перебором логинов ничего не узнать.
- У сессии нет срока действия.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import InvalidCredentialsError
from PROCHECK.DATABASE.CACHE_MANAGER import AuthStateManager, UserManager
from PROCHECK.DATABASE.models import User, utcnow
from .security import dummy_verify, verify_password


logger = logging.getLogger("procheck.auth")


@dataclass
class AuthSnapshot:
    """Текущее состояние авторизации.

    Поля:
    - current_user_id: id вошедшего пользователя или None.
    - last_login: время последнего входа (UTC) или None.
    """

    current_user_id: Optional[str]
    last_login: Optional[datetime]


async def login(session: AsyncSession, username: str, password: str) -> User:
    user = await UserManager(session).get_user_by_username(username)
    if user is None:
        dummy_verify(password)
        logger.warning("Login failed for username=%r", username)
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        logger.warning("Login failed for username=%r", username)
        raise InvalidCredentialsError()

    await AuthStateManager(session).save_state(user.id, utcnow())
    logger.info("User %s logged in", user.id)
    return user


async def logout(session: AsyncSession) -> None:
    await AuthStateManager(session).clear()
    logger.info("Session cleared")


async def current_session(session: AsyncSession) -> AuthSnapshot:
    state = await AuthStateManager(session).get_state()
    if state is None:
        return AuthSnapshot(current_user_id=None, last_login=None)
    return AuthSnapshot(current_user_id=state.current_user_id, last_login=state.last_login)
