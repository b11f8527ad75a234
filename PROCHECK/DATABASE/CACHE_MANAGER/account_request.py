# Руководство к файлу (DATABASE/CACHE_MANAGER/account_request.py)
# Назначение:
# - Менеджер заявок на создание аккаунта: создание, чтение, поиск ожидающих по логину,
#   список, фиксация решения администратора.

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.types import AccountRequestStatus
from .base_class import BaseManager
from .user import normalize_username
from ..models import AccountRequest, utcnow


class AccountRequestManager(BaseManager):
    entity_name = "Заявка"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_request(self, *, username: str, password_hash: str, role: str, purpose: str) -> AccountRequest:
        return await self.create(
            AccountRequest,
            {
                "username": username.strip(),
                "username_lower": normalize_username(username),
                "password_hash": password_hash,
                "role": role,
                "purpose": purpose or "",
                "requested_at": utcnow(),
                "status": AccountRequestStatus.PENDING.value,
            },
        )

    async def get_request(self, request_id: str) -> Optional[AccountRequest]:
        return await self.get_by_id(AccountRequest, request_id)

    async def find_pending_by_username(self, username: str) -> Optional[AccountRequest]:
        q = select(AccountRequest).where(
            AccountRequest.username_lower == normalize_username(username),
            AccountRequest.status == AccountRequestStatus.PENDING.value,
        )
        res = await self.session.execute(q)
        return res.scalars().first()

    async def list_requests(self, status: Optional[str] = None) -> List[AccountRequest]:
        q = select(AccountRequest)
        if status is not None:
            q = q.where(AccountRequest.status == status)
        q = q.order_by(AccountRequest.requested_at.desc())
        res = await self.session.execute(q)
        return list(res.scalars().all())

    async def mark_reviewed(self, request_id: str, *, status: str, reviewer_id: str) -> AccountRequest:
        return await self.update_by_id(
            AccountRequest,
            request_id,
            {"status": status, "reviewed_by": reviewer_id, "reviewed_at": utcnow()},
        )

    async def delete_all(self) -> int:
        return await self.delete_where(AccountRequest)
