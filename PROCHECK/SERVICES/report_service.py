"""Руководство к файлу (PROCHECK/SERVICES/report_service.py)
Назначение:
- Формирование отчёта по выполняемой проверке, привязка к проверке и фиксация.
- Текст отчёта собирается из данных проверки и статусов пунктов и сохраняется
  в DocumentStore, если вызывающий не передал готовую ссылку на документ.
Важно:
- Отчёт создаётся один раз на проверку (Conflict при повторе).
- Вставка отчёта, status=завершена и report_id пишутся в одной сессии:
  коммит или откат выполняет get_db_session.
- locked=True сразу при создании и никогда не снимается; editable_until
  хранится, но ничего не ограничивает.
- Файл документа живёт вместе с транзакцией: записанный при создании удаляется
  при откате, удаляемый вместе с отчётом стирается только после коммита.
- Одна ссылка на документ не может принадлежать двум отчётам.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import ConflictError, InvalidStateError, UnauthorizedError, ValidationFailedError
from PROCHECK.CORE.types import InspectionStatus, UserRole
from PROCHECK.DATABASE.CACHE_MANAGER import InspectionManager, ReportManager
from PROCHECK.DATABASE.models import Inspection, Report, User, utcnow
from PROCHECK.DATABASE.session import run_after_commit, run_after_rollback
from .document_store import DocumentStore
from .inspection_service import ensure_transition
from .policy import require_assigned_inspector, require_role
from .report_pdf import render_report_pdf


logger = logging.getLogger("procheck.reports")


def render_report_text(inspection: Inspection, inspector_name: str, created_at: datetime) -> str:
    header = (
        f"Отчёт по проверке: {inspection.title}\n"
        f"Инспектор: {inspector_name}\n"
        f"Дата: {created_at.strftime('%d.%m.%Y %H:%M:%S')}"
    )
    enterprise = f"Предприятие: {inspection.enterprise_name}\nАдрес: {inspection.enterprise_address}\n"
    items = "\n".join(
        f"{idx}. {item.text}\n   Статус: {item.status}\n"
        for idx, item in enumerate(inspection.check_items, start=1)
    )
    conclusion = f"Статус проверки: {inspection.status}\n"
    return "\n".join([header, enterprise, items, conclusion])


async def create_report(
    session: AsyncSession,
    actor: User,
    inspection_id: str,
    *,
    document_ref: Optional[str] = None,
    store: Optional[DocumentStore] = None,
) -> Report:
    """Создать отчёт и завершить им проверку.

    Порядок проверок: проверка существует -> актор назначенный инспектор ->
    отчёта ещё нет -> проверка выполняется.
    """

    inspections = InspectionManager(session)
    reports = ReportManager(session)

    inspection = await inspections.require_inspection(inspection_id)
    require_assigned_inspector(actor, inspection)
    if await reports.get_by_inspection(inspection_id) is not None:
        logger.warning("Report for inspection %s already exists", inspection_id)
        raise ConflictError("Отчёт по этой проверке уже существует")
    # Завершить можно только выполняемую проверку
    ensure_transition(inspection, InspectionStatus.COMPLETED)

    created_at = utcnow()
    written_ref: Optional[str] = None
    if document_ref is not None:
        document_ref = document_ref.strip()
        if not document_ref:
            raise ValidationFailedError("Пустая ссылка на документ отчёта")
        # Документ принадлежит ровно одному отчёту
        if await reports.get_by_document_ref(document_ref) is not None:
            logger.warning("Document %s is already attached to another report", document_ref)
            raise ConflictError("Документ уже привязан к другому отчёту")
    else:
        if store is None:
            raise InvalidStateError("Не задано хранилище документов")
        text = render_report_text(inspection, actor.full_name, created_at)
        written_ref = store.put_text(f"report_{inspection.id}", text)
        document_ref = written_ref

    try:
        report = await reports.create_report(
            inspection_id=inspection.id,
            created_by=actor.id,
            customer_id=inspection.customer_id,
            created_at=created_at,
            document_ref=document_ref,
            editable_until=created_at,
        )
    except IntegrityError as exc:
        # Параллельный запрос успел создать отчёт: UNIQUE(inspection_id)
        if written_ref is not None:
            store.delete(written_ref)
        logger.warning("Report for inspection %s already exists (concurrent insert)", inspection_id)
        raise ConflictError("Отчёт по этой проверке уже существует") from exc
    if written_ref is not None:
        run_after_rollback(session, lambda: store.delete(written_ref))
    await inspections.update_fields(
        inspection.id,
        {"status": InspectionStatus.COMPLETED.value, "report_id": report.id},
    )
    logger.info("Report %s created for inspection %s by %s; inspection completed", report.id, inspection.id, actor.id)
    return report


def can_view_report(actor: User, report: Report) -> bool:
    if actor.role in (UserRole.ADMIN.value, UserRole.SENIOR_INSPECTOR.value):
        return True
    return actor.id in (report.created_by, report.customer_id)


async def get_report(session: AsyncSession, actor: User, report_id: str) -> Report:
    report = await ReportManager(session).require_report(report_id)
    if not can_view_report(actor, report):
        raise UnauthorizedError("Нет доступа к отчёту")
    return report


async def list_reports(session: AsyncSession, actor: User) -> List[Report]:
    """Отчёты, доступные актору: свои для заказчика и инспектора, все для остальных."""

    mgr = ReportManager(session)
    if actor.role == UserRole.CUSTOMER.value:
        return await mgr.list_reports(customer_id=actor.id)
    if actor.role == UserRole.INSPECTOR.value:
        return await mgr.list_reports(created_by=actor.id)
    return await mgr.list_reports()


async def read_report_document(session: AsyncSession, actor: User, report_id: str, store: DocumentStore) -> str:
    report = await get_report(session, actor, report_id)
    return store.read_text(report.document_ref)


async def export_report_pdf(session: AsyncSession, actor: User, report_id: str, store: DocumentStore) -> bytes:
    """PDF-версия документа отчёта (собирается на лету, не хранится)."""

    text = await read_report_document(session, actor, report_id, store)
    return render_report_pdf(text, title=f"Отчёт {report_id}")


async def lock_report(session: AsyncSession, actor: User, report_id: str) -> Report:
    """Зафиксировать отчёт (повторный вызов ничего не меняет)."""

    mgr = ReportManager(session)
    report = await mgr.require_report(report_id)
    if actor.role != UserRole.ADMIN.value and actor.id != report.created_by:
        raise UnauthorizedError("Фиксировать отчёт может автор или администратор")
    report = await mgr.lock_report(report_id)
    logger.info("Report %s locked by %s", report_id, actor.id)
    return report


async def delete_report(session: AsyncSession, actor: User, report_id: str, store: Optional[DocumentStore] = None) -> None:
    """Удаление администратором; report_id проверки сбрасывается в той же транзакции."""

    require_role(actor, UserRole.ADMIN)
    reports = ReportManager(session)
    report = await reports.require_report(report_id)
    inspection = await InspectionManager(session).get_inspection(report.inspection_id)
    document_ref = report.document_ref

    await reports.delete_report(report_id)
    if inspection is not None and inspection.report_id == report_id:
        inspection.report_id = None
        await session.flush()
    if store is not None:
        # Файл удаляется только после коммита
        run_after_commit(session, lambda: store.delete(document_ref))
    logger.info("Report %s deleted by admin %s", report_id, actor.id)

