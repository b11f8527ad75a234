"""Руководство к файлу (PROCHECK/SERVICES/user_service.py)
Назначение:
- Администрирование пользователей: создание (с приветственным чатом администратора),
  удаление, правка профиля, смена собственного пароля, списки.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import ConflictError, InvalidCredentialsError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import UserRole
from PROCHECK.DATABASE.CACHE_MANAGER import UserManager
from PROCHECK.DATABASE.models import User
from . import chat_service
from .policy import require_role
from .security import MIN_PASSWORD_LENGTH, hash_password, verify_password


logger = logging.getLogger("procheck.users")

WELCOME_TEXT = "Добро пожаловать в ProCheck! Вы можете обратиться ко мне за помощью в этом чате."


def parse_role(value: str) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        raise ValidationFailedError(f"Неизвестная роль: {value}")


async def create_user(
    session: AsyncSession,
    actor: User,
    *,
    username: str,
    password: str,
    role: str,
    full_name: str,
    profile: Optional[Dict[str, Any]] = None,
) -> User:
    require_role(actor, UserRole.ADMIN)
    role_value = parse_role(role).value
    if not username.strip() or not password:
        raise ValidationFailedError("Логин и пароль обязательны")

    users = UserManager(session)
    if await users.get_user_by_username(username) is not None:
        raise ConflictError("Пользователь с таким логином уже существует")

    user = await users.create_user(
        username=username,
        password_hash=hash_password(password),
        role=role_value,
        full_name=full_name.strip() or username.strip(),
        profile=profile,
    )
    await chat_service.provision_welcome_chat(
        session,
        actor,
        user,
        title=f"Чат с администратором ({user.full_name})",
        text=WELCOME_TEXT,
    )
    logger.info("User %s (%s) created by admin %s", user.id, role_value, actor.id)
    return user


async def get_user(session: AsyncSession, user_id: str) -> User:
    return await UserManager(session).require(User, user_id)


async def list_users(session: AsyncSession, role: Optional[str] = None) -> List[User]:
    if role is not None:
        role = parse_role(role).value
    return await UserManager(session).list_users(role)


async def update_profile(session: AsyncSession, actor: User, user_id: str, profile: Dict[str, Any]) -> User:
    """Правка профиля владельцем или администратором; full_name меняется, если передан."""

    if actor.id != user_id and actor.role != UserRole.ADMIN.value:
        raise UnauthorizedError("Профиль может менять только владелец или администратор")
    if "full_name" in profile:
        full_name = (profile["full_name"] or "").strip()
        if not full_name:
            raise ValidationFailedError("Имя не может быть пустым")
        profile = {**profile, "full_name": full_name}
    user = await UserManager(session).update_profile(user_id, profile)
    logger.info("Profile of %s updated by %s", user_id, actor.id)
    return user


async def change_password(
    session: AsyncSession,
    actor: User,
    *,
    current_password: str,
    new_password: str,
    confirm_password: str,
) -> User:
    """Смена собственного пароля: текущий пароль, совпадение подтверждения, минимальная длина."""

    if not current_password or not new_password or not confirm_password:
        raise ValidationFailedError("Заполните все поля")
    if not verify_password(current_password, actor.password_hash):
        logger.warning("Password change for %s rejected: wrong current password", actor.id)
        raise InvalidCredentialsError("Текущий пароль указан неверно")
    if new_password != confirm_password:
        raise ValidationFailedError("Новые пароли не совпадают")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailedError(f"Пароль должен содержать минимум {MIN_PASSWORD_LENGTH} символа")

    user = await UserManager(session).update_password(actor.id, hash_password(new_password))
    logger.info("Password of %s changed", actor.id)
    return user


async def delete_user(session: AsyncSession, actor: User, user_id: str) -> None:
    require_role(actor, UserRole.ADMIN)
    if actor.id == user_id:
        raise ConflictError("Нельзя удалить собственную учётную запись")
    await UserManager(session).delete_user(user_id)
    logger.info("User %s deleted by admin %s", user_id, actor.id)
