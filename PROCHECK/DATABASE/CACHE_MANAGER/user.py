# Руководство к файлу (DATABASE/CACHE_MANAGER/user.py)
# Назначение:
# - Менеджер пользователей: создание/чтение/удаление, поиск по логину, профиль.
# - Работает поверх SQLAlchemy AsyncSession.

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_class import BaseManager
from ..models import User


PROFILE_FIELDS = ("specialization", "work_hours", "phone", "email", "avatar_ref")


def normalize_username(username: str) -> str:
    return (username or "").strip().lower()


class UserManager(BaseManager):
    entity_name = "Пользователь"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        full_name: str,
        profile: Optional[Dict[str, Any]] = None,
    ) -> User:
        data: Dict[str, Any] = {
            "username": username.strip(),
            "username_lower": normalize_username(username),
            "password_hash": password_hash,
            "role": role,
            "full_name": full_name,
        }
        for key in PROFILE_FIELDS:
            data[key] = (profile or {}).get(key)
        return await self.create(User, data)

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.get_by_id(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Поиск без учёта регистра и пробелов по краям."""

        q = select(User).where(User.username_lower == normalize_username(username))
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_users(self, role: Optional[str] = None) -> List[User]:
        q = select(User)
        if role is not None:
            q = q.where(User.role == role)
        q = q.order_by(User.full_name)
        res = await self.session.execute(q)
        return list(res.scalars().all())

    async def update_profile(self, user_id: str, profile: Dict[str, Any]) -> User:
        patch = {key: profile[key] for key in PROFILE_FIELDS if key in profile}
        if profile.get("full_name"):
            patch["full_name"] = profile["full_name"]
        return await self.update_by_id(User, user_id, patch)

    async def update_password(self, user_id: str, password_hash: str) -> User:
        return await self.update_by_id(User, user_id, {"password_hash": password_hash})

    async def delete_user(self, user_id: str) -> None:
        await self.delete_by_id(User, user_id)

    async def delete_all_except(self, keep_user_id: str) -> int:
        return await self.delete_where(User, User.id != keep_user_id)
