# Руководство к файлу (DATABASE/CACHE_MANAGER/auth.py)
# Назначение: хранение текущей сессии (current_user_id, last_login) в единственной строке auth_state.

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .base_class import BaseManager
from ..models import AuthState


AUTH_STATE_ROW_ID = 1


class AuthStateManager(BaseManager):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def get_state(self) -> Optional[AuthState]:
        return await self.get_by_id(AuthState, AUTH_STATE_ROW_ID)

    async def save_state(self, user_id: Optional[str], last_login: Optional[datetime]) -> AuthState:
        state = await self.get_state()
        if state is None:
            return await self.create(
                AuthState,
                {"id": AUTH_STATE_ROW_ID, "current_user_id": user_id, "last_login": last_login},
            )
        state.current_user_id = user_id
        state.last_login = last_login
        await self.session.flush()
        return state

    async def clear(self) -> AuthState:
        return await self.save_state(None, None)
