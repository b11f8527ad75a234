# Руководство к файлу (DATABASE/CACHE_MANAGER/base_class.py)
# Назначение:
# - Базовый класс менеджера данных ProCheck на SQLAlchemy (async).
# - Общие утилиты: генерация id, безопасная пагинация, CRUD-хелперы.
# Важно:
# - update/delete по неизвестному id бросают NotFoundError, а не молча возвращают 0.
# - Удаление по id идёт через session.delete(), чтобы сработали ORM-каскады дочерних строк;
#   массовое delete_where опирается на ON DELETE CASCADE в БД.

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar
from uuid import uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from PROCHECK.CORE.errors import NotFoundError
from ..models import Base


TModel = TypeVar("TModel", bound=Base)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex}"


class BaseManager:
    # Человекочитаемое имя сущности для сообщений NotFound
    entity_name = "Запись"

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _clamp_page_limit(page: int | None, limit: int | None, max_limit: int = 100) -> Tuple[int, int]:
        p = 1 if not page or page < 1 else int(page)
        l = 20 if not limit or limit < 1 else int(limit)
        l = min(max_limit, l)
        return p, l

    async def get_by_id(self, model: Type[TModel], obj_id: Any) -> Optional[TModel]:
        q = select(model).where(getattr(model, "id") == obj_id).limit(1)
        res = await self.session.execute(q)
        return res.scalar_one_or_none()

    async def require(self, model: Type[TModel], obj_id: Any) -> TModel:
        obj = await self.get_by_id(model, obj_id)
        if obj is None:
            raise NotFoundError(self.entity_name, str(obj_id))
        return obj

    async def create(self, model: Type[TModel], data: Dict[str, Any]) -> TModel:
        if "id" not in data and hasattr(model, "ID_PREFIX"):
            data["id"] = generate_id(getattr(model, "ID_PREFIX"))
        obj = model(**data)  # type: ignore[arg-type]
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def update_by_id(self, model: Type[TModel], obj_id: Any, data: Dict[str, Any]) -> TModel:
        """Частичное обновление: поля, которых нет в data, не трогаются."""
        obj = await self.require(model, obj_id)
        for key, value in data.items():
            setattr(obj, key, value)
        await self.session.flush()
        return obj

    async def delete_by_id(self, model: Type[TModel], obj_id: Any) -> None:
        obj = await self.require(model, obj_id)
        await self.session.delete(obj)
        await self.session.flush()

    async def update_where(self, model: Type[TModel], data: Dict[str, Any], *conds: Any) -> int:
        """Массовое обновление без загрузки строк; возвращает число затронутых строк."""
        q = update(model).where(*conds).values(**data)
        res = await self.session.execute(q)
        return int(res.rowcount or 0)

    async def delete_where(self, model: Type[TModel], *conds: Any) -> int:
        """Массовое удаление; дочерние строки уходят по ON DELETE CASCADE в БД."""
        q = delete(model).where(*conds)
        res = await self.session.execute(q)
        return int(res.rowcount or 0)

    async def paginate(self, model: Type[TModel], where: List[Any] | None = None, order_by: List[Any] | InstrumentedAttribute | None = None, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        page, limit = self._clamp_page_limit(page, limit)
        conds = where or []
        # total
        count_q = select(func.count()).select_from(model).where(*conds)
        total = (await self.session.execute(count_q)).scalar_one() or 0
        # items
        q = select(model).where(*conds)
        if order_by is not None:
            q = q.order_by(*order_by) if isinstance(order_by, list) else q.order_by(order_by)
        q = q.offset((page - 1) * limit).limit(limit)
        res = await self.session.execute(q)
        items = list(res.scalars().all())
        pages = (total + limit - 1) // limit if limit else 1
        return {"items": items, "total": int(total), "page": page, "pages": int(pages)}
