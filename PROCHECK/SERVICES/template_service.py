"""Руководство к файлу (PROCHECK/SERVICES/template_service.py)
Назначение: шаблоны проверок (чек-листы). Создаёт и правит старший инспектор,
удалять может также администратор. Проверки получают копию пунктов, а не ссылку.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import ValidationFailedError
from PROCHECK.CORE.types import UserRole
from PROCHECK.DATABASE.CACHE_MANAGER import TemplateManager
from PROCHECK.DATABASE.models import Template, User
from .policy import require_role


logger = logging.getLogger("procheck.templates")


def _clean_items(item_texts: Sequence[str]) -> List[str]:
    texts = [t.strip() for t in item_texts if t and t.strip()]
    if not texts:
        raise ValidationFailedError("Шаблон должен содержать хотя бы один пункт")
    return texts


async def create_template(
    session: AsyncSession,
    actor: User,
    *,
    title: str,
    item_texts: Sequence[str],
    description: Optional[str] = None,
) -> Template:
    require_role(actor, UserRole.SENIOR_INSPECTOR)
    if not title.strip():
        raise ValidationFailedError("Название шаблона обязательно")
    template = await TemplateManager(session).create_template(
        title=title.strip(),
        description=description,
        item_texts=_clean_items(item_texts),
        created_by=actor.id,
    )
    logger.info("Template %s created by %s", template.id, actor.id)
    return template


async def get_template(session: AsyncSession, template_id: str) -> Template:
    return await TemplateManager(session).require(Template, template_id)


async def list_templates(session: AsyncSession) -> List[Template]:
    return await TemplateManager(session).list_templates()


async def update_template(
    session: AsyncSession,
    actor: User,
    template_id: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    item_texts: Optional[Sequence[str]] = None,
) -> Template:
    require_role(actor, UserRole.SENIOR_INSPECTOR)
    if title is not None and not title.strip():
        raise ValidationFailedError("Название шаблона обязательно")
    template = await TemplateManager(session).update_template(
        template_id,
        title=title.strip() if title is not None else None,
        description=description,
        item_texts=_clean_items(item_texts) if item_texts is not None else None,
    )
    logger.info("Template %s updated by %s", template_id, actor.id)
    return template


async def delete_template(session: AsyncSession, actor: User, template_id: str) -> None:
    require_role(actor, UserRole.SENIOR_INSPECTOR, UserRole.ADMIN)
    await TemplateManager(session).delete_template(template_id)
    logger.info("Template %s deleted by %s", template_id, actor.id)
