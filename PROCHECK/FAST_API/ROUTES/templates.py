# Руководство к файлу (ROUTES/templates.py)
# Назначение:
# - Шаблоны чек-листов: создание и правка старшим инспектором, чтение всеми.

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor
from ..schemas import OkResponse, TemplateCreateRequest, TemplateResponse, TemplateUpdateRequest
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import template_service


router = APIRouter(prefix="/templates", tags=["templates"])


@router.post("", response_model=TemplateResponse)
async def create_template(
    payload: TemplateCreateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await template_service.create_template(
        session, actor, title=payload.title, item_texts=payload.items, description=payload.description
    )


@router.get("", response_model=List[TemplateResponse])
async def list_templates(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    return await template_service.list_templates(session)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await template_service.get_template(session, template_id)


@router.patch("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    payload: TemplateUpdateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await template_service.update_template(
        session,
        actor,
        template_id,
        title=payload.title,
        description=payload.description,
        item_texts=payload.items,
    )


@router.delete("/{template_id}", response_model=OkResponse)
async def delete_template(
    template_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await template_service.delete_template(session, actor, template_id)
    return OkResponse()
