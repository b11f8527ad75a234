# Руководство к файлу (DATABASE/CACHE_MANAGER/template.py)
# Назначение:
# - Менеджер шаблонов проверок и их упорядоченных пунктов.
# - Пункты шаблона принадлежат шаблону: при замене списка и удалении шаблона удаляются каскадом.

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .base_class import BaseManager, generate_id
from ..models import Template, TemplateItem, utcnow


def _build_items(texts: Sequence[str]) -> List[TemplateItem]:
    return [
        TemplateItem(id=generate_id(TemplateItem.ID_PREFIX), position=idx, text=text)
        for idx, text in enumerate(texts)
    ]


class TemplateManager(BaseManager):
    entity_name = "Шаблон"

    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_template(
        self,
        *,
        title: str,
        description: Optional[str],
        item_texts: Sequence[str],
        created_by: Optional[str],
    ) -> Template:
        return await self.create(
            Template,
            {
                "title": title,
                "description": description,
                "created_by": created_by,
                "updated_at": utcnow(),
                "items": _build_items(item_texts),
            },
        )

    async def get_template(self, template_id: str) -> Optional[Template]:
        return await self.get_by_id(Template, template_id)

    async def list_templates(self) -> List[Template]:
        res = await self.session.execute(select(Template).order_by(Template.title))
        return list(res.scalars().all())

    async def update_template(
        self,
        template_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        item_texts: Optional[Sequence[str]] = None,
    ) -> Template:
        patch: Dict[str, Any] = {"updated_at": utcnow()}
        if title is not None:
            patch["title"] = title
        if description is not None:
            patch["description"] = description
        if item_texts is not None:
            # delete-orphan удалит старые пункты при flush
            patch["items"] = _build_items(item_texts)
        return await self.update_by_id(Template, template_id, patch)

    async def delete_template(self, template_id: str) -> None:
        await self.delete_by_id(Template, template_id)

    async def delete_all(self) -> int:
        return await self.delete_where(Template)
