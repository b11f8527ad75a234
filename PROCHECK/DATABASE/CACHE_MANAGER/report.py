# Руководство к файлу (DATABASE/CACHE_MANAGER/report.py)
# Назначение:
# - Менеджер отчётов: создание, чтение, поиск по проверке, выборки, фиксация, удаление.
# Важно:
# - Уникальность отчёта на проверку держит и сервис (Conflict), и UNIQUE(inspection_id).

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_class import BaseManager
from ..models import Report


class ReportManager(BaseManager):
    entity_name = "Отчёт"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_report(
        self,
        *,
        inspection_id: str,
        created_by: str,
        customer_id: Optional[str],
        created_at: datetime,
        document_ref: str,
        editable_until: datetime,
    ) -> Report:
        return await self.create(
            Report,
            {
                "inspection_id": inspection_id,
                "created_by": created_by,
                "customer_id": customer_id,
                "created_at": created_at,
                "document_ref": document_ref,
                "editable_until": editable_until,
                "locked": True,
            },
        )

    async def get_report(self, report_id: str) -> Optional[Report]:
        return await self.get_by_id(Report, report_id)

    async def require_report(self, report_id: str) -> Report:
        return await self.require(Report, report_id)

    async def get_by_inspection(self, inspection_id: str) -> Optional[Report]:
        q = select(Report).where(Report.inspection_id == inspection_id).limit(1)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def list_reports(
        self,
        *,
        customer_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> List[Report]:
        q = select(Report)
        if customer_id is not None:
            q = q.where(Report.customer_id == customer_id)
        if created_by is not None:
            q = q.where(Report.created_by == created_by)
        q = q.order_by(Report.created_at.desc())
        res = await self.session.execute(q)
        return list(res.scalars().all())

    async def lock_report(self, report_id: str) -> Report:
        return await self.update_by_id(Report, report_id, {"locked": True})

    async def get_by_document_ref(self, document_ref: str) -> Optional[Report]:
        q = select(Report).where(Report.document_ref == document_ref).limit(1)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def delete_report(self, report_id: str) -> None:
        await self.delete_by_id(Report, report_id)

    async def delete_all(self) -> List[str]:
        """Удалить все отчёты; вернуть ссылки на их документы."""

        res = await self.session.execute(select(Report.document_ref))
        refs = list(res.scalars().all())
        await self.delete_where(Report)
        return refs
