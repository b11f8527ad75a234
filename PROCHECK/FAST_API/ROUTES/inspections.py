# Руководство к файлу (ROUTES/inspections.py)
# Назначение:
# - Жизненный цикл проверки поверх inspection_service.
# - Реализует: POST /inspections, GET /inspections, GET/PATCH/DELETE /inspections/{id},
#             POST /inspections/{id}/assign|cancel|start,
#             PATCH /inspections/{id}/check-items/{item_id},
#             POST/DELETE /inspections/{id}/photos.
# Важно:
# - Роутер ничего не перехватывает: доменные ошибки превращает в JSON обработчик в fast_api.py.

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor, get_document_store
from ..schemas import (
    CheckItemResponse,
    CheckItemStatusRequest,
    InspectionAssignRequest,
    InspectionCreateRequest,
    InspectionResponse,
    InspectionsPage,
    InspectionUpdateRequest,
    OkResponse,
    PhotoRequest,
)
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import inspection_service
from PROCHECK.SERVICES.inspection_service import InspectionDraft
from PROCHECK.SERVICES.document_store import DocumentStore


router = APIRouter(prefix="/inspections", tags=["inspections"])


@router.post("", response_model=InspectionResponse)
async def create_inspection(
    payload: InspectionCreateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    draft = InspectionDraft(**payload.model_dump())
    return await inspection_service.create_inspection(session, actor, draft)


@router.get("", response_model=InspectionsPage)
async def list_inspections(
    status: Optional[str] = None,
    group: Optional[str] = None,
    active: Optional[bool] = None,
    sort_by: str = "planDate",
    descending: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.list_inspections(
        session,
        actor,
        status=status,
        group=group,
        active=active,
        sort_by=sort_by,
        descending=descending,
        page=page,
        limit=limit,
    )


@router.get("/{inspection_id}", response_model=InspectionResponse)
async def get_inspection(
    inspection_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.get_inspection(session, actor, inspection_id)


@router.patch("/{inspection_id}", response_model=InspectionResponse)
async def update_inspection(
    inspection_id: str,
    payload: InspectionUpdateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    fields = payload.model_dump(exclude_unset=True)
    check_items = fields.pop("check_items", None)
    return await inspection_service.update_inspection(
        session, actor, inspection_id, fields=fields, check_items=check_items
    )


@router.post("/{inspection_id}/assign", response_model=InspectionResponse)
async def assign_inspection(
    inspection_id: str,
    payload: InspectionAssignRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.assign_inspection(
        session, actor, inspection_id, payload.inspector_id, plan_date=payload.plan_date
    )


@router.post("/{inspection_id}/cancel", response_model=InspectionResponse)
async def cancel_inspection(
    inspection_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.cancel_inspection(session, actor, inspection_id)


@router.post("/{inspection_id}/start", response_model=InspectionResponse)
async def start_inspection(
    inspection_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.start_inspection(session, actor, inspection_id)


@router.patch("/{inspection_id}/check-items/{item_id}", response_model=CheckItemResponse)
async def update_check_item_status(
    inspection_id: str,
    item_id: str,
    payload: CheckItemStatusRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.update_check_item_status(session, actor, inspection_id, item_id, payload.status)


@router.post("/{inspection_id}/photos", response_model=InspectionResponse)
async def add_photo(
    inspection_id: str,
    payload: PhotoRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.add_photo(session, actor, inspection_id, payload.ref)


@router.delete("/{inspection_id}/photos", response_model=InspectionResponse)
async def remove_photo(
    inspection_id: str,
    ref: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await inspection_service.remove_photo(session, actor, inspection_id, ref)


@router.delete("/{inspection_id}", response_model=OkResponse)
async def delete_inspection(
    inspection_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    await inspection_service.delete_inspection(session, actor, inspection_id, store=store)
    return OkResponse()
