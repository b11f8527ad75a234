# Руководство к файлу (ROUTES/reports.py)
# Назначение:
# - Отчёты по проверкам: создание назначенным инспектором (завершает проверку),
#   просмотр, текст документа и его PDF-версия, фиксация и удаление администратором.

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor, get_document_store
from ..schemas import OkResponse, ReportCreateRequest, ReportResponse
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import report_service
from PROCHECK.SERVICES.document_store import DocumentStore


router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportResponse)
async def create_report(
    payload: ReportCreateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    return await report_service.create_report(
        session, actor, payload.inspection_id, document_ref=payload.document_ref, store=store
    )


@router.get("", response_model=List[ReportResponse])
async def list_reports(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    return await report_service.list_reports(session, actor)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await report_service.get_report(session, actor, report_id)


@router.get("/{report_id}/document", response_class=PlainTextResponse)
async def get_report_document(
    report_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    return await report_service.read_report_document(session, actor, report_id, store)


@router.get("/{report_id}/pdf")
async def get_report_pdf(
    report_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    pdf = await report_service.export_report_pdf(session, actor, report_id, store)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_id}.pdf"'},
    )


@router.post("/{report_id}/lock", response_model=ReportResponse)
async def lock_report(
    report_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await report_service.lock_report(session, actor, report_id)


@router.delete("/{report_id}", response_model=OkResponse)
async def delete_report(
    report_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    await report_service.delete_report(session, actor, report_id, store=store)
    return OkResponse()
