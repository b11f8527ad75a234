# Руководство к файлу (DATABASE/CACHE_MANAGER/inspection.py)
# Назначение:
# - Менеджер проверок: создание с пунктами и фото, частичное обновление полей,
#   замена пунктов, статус отдельного пункта, фото, фильтрованный список.
# Важно:
# - Менеджер не знает о машине состояний: допустимость переходов и права актора
#   проверяет SERVICES/inspection_service.py.

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import NotFoundError
from .base_class import BaseManager, generate_id
from ..models import CheckItem, Inspection, InspectionPhoto, utcnow


SORT_COLUMNS = {
    "planDate": Inspection.plan_date,
    "createdAt": Inspection.created_at,
}


def build_check_items(items: Sequence[Tuple[str, str]]) -> List[CheckItem]:
    """(text, status) -> CheckItem со свежими id в исходном порядке."""

    return [
        CheckItem(id=generate_id(CheckItem.ID_PREFIX), position=idx, text=text, status=status)
        for idx, (text, status) in enumerate(items)
    ]


def build_photos(refs: Iterable[str], start: int = 0) -> List[InspectionPhoto]:
    return [
        InspectionPhoto(id=generate_id(InspectionPhoto.ID_PREFIX), position=start + idx, ref=ref)
        for idx, ref in enumerate(refs)
    ]


class InspectionManager(BaseManager):
    entity_name = "Проверка"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_inspection(
        self,
        data: Dict[str, Any],
        *,
        check_items: Sequence[Tuple[str, str]],
        photos: Sequence[str] = (),
    ) -> Inspection:
        payload = dict(data)
        payload.setdefault("created_at", utcnow())
        payload["check_items"] = build_check_items(check_items)
        payload["photos"] = build_photos(photos)
        return await self.create(Inspection, payload)

    async def get_inspection(self, inspection_id: str) -> Optional[Inspection]:
        return await self.get_by_id(Inspection, inspection_id)

    async def require_inspection(self, inspection_id: str) -> Inspection:
        return await self.require(Inspection, inspection_id)

    async def update_fields(self, inspection_id: str, patch: Dict[str, Any]) -> Inspection:
        return await self.update_by_id(Inspection, inspection_id, patch)

    async def replace_check_items(self, inspection_id: str, items: Sequence[Tuple[str, str]]) -> Inspection:
        return await self.update_by_id(Inspection, inspection_id, {"check_items": build_check_items(items)})

    async def set_check_item_status(self, inspection_id: str, item_id: str, status: str) -> CheckItem:
        inspection = await self.require_inspection(inspection_id)
        for item in inspection.check_items:
            if item.id == item_id:
                item.status = status
                await self.session.flush()
                return item
        raise NotFoundError("Пункт проверки", item_id)

    async def add_photo(self, inspection_id: str, ref: str) -> Inspection:
        inspection = await self.require_inspection(inspection_id)
        next_pos = max((p.position for p in inspection.photos), default=-1) + 1
        inspection.photos.extend(build_photos([ref], start=next_pos))
        await self.session.flush()
        return inspection

    async def remove_photo(self, inspection_id: str, ref: str) -> Inspection:
        """Удаляет все вхождения ссылки; отсутствующая ссылка не ошибка."""

        inspection = await self.require_inspection(inspection_id)
        inspection.photos = [p for p in inspection.photos if p.ref != ref]
        await self.session.flush()
        return inspection

    async def list_inspections(
        self,
        *,
        customer_id: Optional[str] = None,
        inspector_id: Optional[str] = None,
        statuses: Optional[Iterable[str]] = None,
        exclude_statuses: Optional[Iterable[str]] = None,
        sort_by: str = "planDate",
        descending: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        where: List[Any] = []
        if customer_id is not None:
            where.append(Inspection.customer_id == customer_id)
        if inspector_id is not None:
            where.append(Inspection.assigned_inspector_id == inspector_id)
        if statuses is not None:
            where.append(Inspection.status.in_(list(statuses)))
        if exclude_statuses is not None:
            where.append(Inspection.status.not_in(list(exclude_statuses)))

        column = SORT_COLUMNS.get(sort_by, Inspection.plan_date)
        order = [column.desc() if descending else column.asc(), Inspection.id]
        return await self.paginate(Inspection, where=where, order_by=order, page=page, limit=limit)

    async def delete_inspection(self, inspection_id: str) -> None:
        await self.delete_by_id(Inspection, inspection_id)

    async def clear_report_links(self) -> int:
        return await self.update_where(Inspection, {"report_id": None})

    async def delete_all(self) -> int:
        return await self.delete_where(Inspection)
