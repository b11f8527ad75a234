"""Руководство к файлу (PROCHECK/SERVICES/inspection_service.py)
Назначение:
- Машина состояний проверки и правила согласованности её данных.
- Создание проверки заказчиком (пункты из шаблона или вручную), назначение и отмена
  старшим инспектором, старт работы и отметка пунктов назначенным инспектором, фото.
- Выборки с фильтрами и сортировкой (не меняют данные).

Переходы (кто инициирует):
    (нет)                -> ожидает утверждения   заказчик
    ожидает утверждения  -> назначена             старший инспектор
    любой нетерминальный -> отменена              старший инспектор
    назначена            -> выполняется           назначенный инспектор
    выполняется          -> завершена             назначенный инспектор, только через отчёт

Статусы «черновик» и «утверждена» допустимы как значения, но переходов в них нет.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.errors import InvalidStateError, NotFoundError, ValidationFailedError
from PROCHECK.CORE.types import (
    CUSTOMER_EDITABLE_STATUSES,
    INSPECTOR_WORK_STATUSES,
    STATUS_GROUPS,
    TERMINAL_STATUSES,
    CheckItemStatus,
    InspectionStatus,
    UserRole,
)
from PROCHECK.DATABASE.CACHE_MANAGER import InspectionManager, ReportManager, TemplateManager, UserManager
from PROCHECK.DATABASE.models import CheckItem, Inspection, User, as_utc_naive, utcnow
from PROCHECK.DATABASE.session import run_after_commit
from .document_store import DocumentStore
from .policy import require_assigned_inspector, require_owner, require_role, require_view_inspection


logger = logging.getLogger("procheck.inspections")


# Допустимые переходы статуса. COMPLETED достижим только из report_service.
TRANSITIONS: Dict[InspectionStatus, FrozenSet[InspectionStatus]] = {
    InspectionStatus.DRAFT: frozenset({InspectionStatus.CANCELLED}),
    InspectionStatus.PENDING_APPROVAL: frozenset({InspectionStatus.ASSIGNED, InspectionStatus.CANCELLED}),
    InspectionStatus.APPROVED: frozenset({InspectionStatus.CANCELLED}),
    InspectionStatus.ASSIGNED: frozenset({InspectionStatus.IN_PROGRESS, InspectionStatus.CANCELLED}),
    InspectionStatus.IN_PROGRESS: frozenset({InspectionStatus.COMPLETED, InspectionStatus.CANCELLED}),
    InspectionStatus.COMPLETED: frozenset(),
    InspectionStatus.CANCELLED: frozenset(),
}

DESCRIPTIVE_FIELDS = ("title", "type", "enterprise_name", "enterprise_address", "plan_date", "report_due_date")

SORT_FIELDS = ("planDate", "createdAt")


def current_status(inspection: Inspection) -> InspectionStatus:
    return InspectionStatus(inspection.status)


def ensure_transition(inspection: Inspection, target: InspectionStatus) -> InspectionStatus:
    """Проверить, что переход допустим; вернуть текущий статус."""

    source = current_status(inspection)
    if target not in TRANSITIONS[source]:
        logger.warning("Inspection %s: transition %s -> %s rejected", inspection.id, source.value, target.value)
        raise InvalidStateError(f"Переход «{source.value}» -> «{target.value}» недопустим")
    return source


def parse_check_item_status(value: str) -> CheckItemStatus:
    try:
        return CheckItemStatus(value)
    except ValueError:
        raise ValidationFailedError(f"Неизвестный статус пункта: {value}")


@dataclass
class InspectionDraft:
    """Данные новой проверки от заказчика.

    check_items: тексты пунктов, введённые вручную. Если список пуст, а
    template_id задан, пункты копируются из шаблона.
    """

    title: str
    type: str
    enterprise_name: str
    enterprise_address: str
    plan_date: datetime
    report_due_date: datetime
    template_id: Optional[str] = None
    check_items: Optional[Sequence[str]] = None
    photos: Sequence[str] = ()


async def _stamp_items(session: AsyncSession, draft: InspectionDraft) -> List[str]:
    if draft.check_items:
        return [t.strip() for t in draft.check_items if t and t.strip()]
    if draft.template_id:
        template = await TemplateManager(session).get_template(draft.template_id)
        if template is None:
            raise NotFoundError("Шаблон", draft.template_id)
        return [item.text for item in template.items]
    return []


async def create_inspection(session: AsyncSession, actor: User, draft: InspectionDraft) -> Inspection:
    require_role(actor, UserRole.CUSTOMER)
    if not draft.title.strip():
        raise ValidationFailedError("Название проверки обязательно")

    texts = await _stamp_items(session, draft)
    if not texts:
        # Пустой чек-лист не доходит до хранилища
        raise ValidationFailedError("Проверка должна содержать хотя бы один пункт")

    unchecked = CheckItemStatus.UNCHECKED.value
    inspection = await InspectionManager(session).create_inspection(
        {
            "title": draft.title.strip(),
            "type": draft.type,
            "customer_id": actor.id,
            "template_id": draft.template_id,
            "created_at": utcnow(),
            "enterprise_name": draft.enterprise_name,
            "enterprise_address": draft.enterprise_address,
            "plan_date": as_utc_naive(draft.plan_date),
            "report_due_date": as_utc_naive(draft.report_due_date),
            "status": InspectionStatus.PENDING_APPROVAL.value,
        },
        check_items=[(text, unchecked) for text in texts],
        photos=list(draft.photos),
    )
    logger.info("Inspection %s created by customer %s with %d items", inspection.id, actor.id, len(texts))
    return inspection


async def reconcile_report_link(session: AsyncSession, inspection: Inspection) -> bool:
    """Починить расхождение Inspection.report_id и Report.inspection_id.

    Авторитетна связь из отчёта. Указатель на несуществующий отчёт сбрасывается,
    отчёт без обратного указателя привязывается, если проверка выполняется
    (она при этом завершается) или уже завершена; в остальных статусах
    расхождение только логируется. Возвращает True, если что-то исправлено.
    """

    report = await ReportManager(session).get_by_inspection(inspection.id)
    if report is None and inspection.report_id is not None:
        logger.warning("Inspection %s: dangling report_id=%s cleared", inspection.id, inspection.report_id)
        inspection.report_id = None
    elif report is not None and inspection.report_id != report.id:
        if inspection.status not in (InspectionStatus.IN_PROGRESS.value, InspectionStatus.COMPLETED.value):
            # report_id допустим только у завершённой проверки
            logger.warning(
                "Inspection %s in status %s has unlinked report %s; left as is",
                inspection.id, inspection.status, report.id,
            )
            return False
        logger.warning("Inspection %s: relinked to report %s", inspection.id, report.id)
        inspection.report_id = report.id
        if inspection.status == InspectionStatus.IN_PROGRESS.value:
            inspection.status = InspectionStatus.COMPLETED.value
    else:
        return False
    await session.flush()
    return True


async def load_inspection(session: AsyncSession, inspection_id: str) -> Inspection:
    """Загрузить проверку, сверив производный указатель report_id с таблицей отчётов."""

    inspection = await InspectionManager(session).require_inspection(inspection_id)
    await reconcile_report_link(session, inspection)
    return inspection


async def get_inspection(session: AsyncSession, actor: User, inspection_id: str) -> Inspection:
    inspection = await load_inspection(session, inspection_id)
    require_view_inspection(actor, inspection)
    return inspection


async def list_inspections(
    session: AsyncSession,
    actor: User,
    *,
    status: Optional[str] = None,
    group: Optional[str] = None,
    active: Optional[bool] = None,
    sort_by: str = "planDate",
    descending: bool = False,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """Список проверок в зоне видимости актора.

    Заказчик видит свои проверки, инспектор видит назначенные ему,
    старший инспектор и администратор видят все.
    """

    if sort_by not in SORT_FIELDS:
        raise ValidationFailedError(f"Сортировка возможна по {', '.join(SORT_FIELDS)}")

    statuses: Optional[set] = None
    if status is not None:
        try:
            statuses = {InspectionStatus(status).value}
        except ValueError:
            raise ValidationFailedError(f"Неизвестный статус: {status}")
    if group is not None:
        if group not in STATUS_GROUPS:
            raise ValidationFailedError(f"Неизвестная группа: {group}")
        group_values = {s.value for s in STATUS_GROUPS[group]}
        statuses = group_values if statuses is None else statuses & group_values

    exclude = None
    if active is True:
        exclude = [s.value for s in TERMINAL_STATUSES]
    elif active is False:
        terminal = {s.value for s in TERMINAL_STATUSES}
        statuses = terminal if statuses is None else statuses & terminal

    scope: Dict[str, Any] = {}
    if actor.role == UserRole.CUSTOMER.value:
        scope["customer_id"] = actor.id
    elif actor.role == UserRole.INSPECTOR.value:
        scope["inspector_id"] = actor.id

    return await InspectionManager(session).list_inspections(
        statuses=statuses,
        exclude_statuses=exclude,
        sort_by=sort_by,
        descending=descending,
        page=page,
        limit=limit,
        **scope,
    )


async def update_inspection(
    session: AsyncSession,
    actor: User,
    inspection_id: str,
    *,
    fields: Optional[Dict[str, Any]] = None,
    check_items: Optional[Sequence[str]] = None,
) -> Inspection:
    """Правка описания и пунктов заказчиком, пока проверка не назначена."""

    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    require_owner(actor, inspection)
    if current_status(inspection) not in CUSTOMER_EDITABLE_STATUSES:
        logger.warning("Inspection %s: edit in status %s rejected", inspection_id, inspection.status)
        raise InvalidStateError("Проверку нельзя редактировать после назначения")

    texts: Optional[List[str]] = None
    if check_items is not None:
        texts = [t.strip() for t in check_items if t and t.strip()]
        if not texts:
            raise ValidationFailedError("Проверка должна содержать хотя бы один пункт")

    patch: Dict[str, Any] = {}
    for key, value in (fields or {}).items():
        if key not in DESCRIPTIVE_FIELDS:
            raise ValidationFailedError(f"Поле {key} нельзя менять напрямую")
        if value is None:
            continue
        patch[key] = as_utc_naive(value) if isinstance(value, datetime) else value
    if patch:
        inspection = await mgr.update_fields(inspection_id, patch)

    if texts is not None:
        inspection = await mgr.replace_check_items(
            inspection_id, [(text, CheckItemStatus.UNCHECKED.value) for text in texts]
        )

    logger.info("Inspection %s edited by %s (fields=%s, items=%s)", inspection_id, actor.id, sorted(patch), check_items is not None)
    return inspection


async def assign_inspection(
    session: AsyncSession,
    actor: User,
    inspection_id: str,
    inspector_id: str,
    plan_date: Optional[datetime] = None,
) -> Inspection:
    """Утвердить заявку и назначить инспектора (с возможным переносом даты)."""

    require_role(actor, UserRole.SENIOR_INSPECTOR)
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    source = ensure_transition(inspection, InspectionStatus.ASSIGNED)

    inspector = await UserManager(session).get_user(inspector_id)
    if inspector is None:
        raise NotFoundError("Пользователь", inspector_id)
    if inspector.role != UserRole.INSPECTOR.value:
        raise ValidationFailedError("Назначить можно только пользователя с ролью inspector")

    patch: Dict[str, Any] = {
        "status": InspectionStatus.ASSIGNED.value,
        "assigned_inspector_id": inspector.id,
        "approved_by_id": actor.id,
        "approved_at": utcnow(),
    }
    if plan_date is not None:
        patch["plan_date"] = as_utc_naive(plan_date)
    inspection = await mgr.update_fields(inspection_id, patch)
    logger.info(
        "Inspection %s: %s -> %s, inspector=%s by %s",
        inspection_id, source.value, inspection.status, inspector.id, actor.id,
    )
    return inspection


async def cancel_inspection(session: AsyncSession, actor: User, inspection_id: str) -> Inspection:
    require_role(actor, UserRole.SENIOR_INSPECTOR)
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    source = ensure_transition(inspection, InspectionStatus.CANCELLED)
    inspection = await mgr.update_fields(
        inspection_id,
        {
            "status": InspectionStatus.CANCELLED.value,
            "approved_by_id": actor.id,
            "approved_at": utcnow(),
        },
    )
    logger.info("Inspection %s: %s -> %s by %s", inspection_id, source.value, inspection.status, actor.id)
    return inspection


async def start_inspection(session: AsyncSession, actor: User, inspection_id: str) -> Inspection:
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    require_assigned_inspector(actor, inspection)
    source = ensure_transition(inspection, InspectionStatus.IN_PROGRESS)
    inspection = await mgr.update_fields(inspection_id, {"status": InspectionStatus.IN_PROGRESS.value})
    logger.info("Inspection %s: %s -> %s by %s", inspection_id, source.value, inspection.status, actor.id)
    return inspection


async def update_check_item_status(
    session: AsyncSession,
    actor: User,
    inspection_id: str,
    item_id: str,
    status: str,
) -> CheckItem:
    """Отметить один пункт; статус самой проверки не меняется."""

    item_status = parse_check_item_status(status)
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    require_assigned_inspector(actor, inspection)
    if current_status(inspection) not in INSPECTOR_WORK_STATUSES:
        raise InvalidStateError("Пункты отмечаются только в назначенной или выполняемой проверке")
    item = await mgr.set_check_item_status(inspection_id, item_id, item_status.value)
    logger.info("Inspection %s: item %s -> %s by %s", inspection_id, item_id, item_status.value, actor.id)
    return item


async def add_photo(session: AsyncSession, actor: User, inspection_id: str, ref: str) -> Inspection:
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    require_assigned_inspector(actor, inspection)
    if current_status(inspection) in TERMINAL_STATUSES:
        raise InvalidStateError("Проверка закрыта")
    if not (ref or "").strip():
        raise ValidationFailedError("Пустая ссылка на фото")
    return await mgr.add_photo(inspection_id, ref.strip())


async def remove_photo(session: AsyncSession, actor: User, inspection_id: str, ref: str) -> Inspection:
    mgr = InspectionManager(session)
    inspection = await mgr.require_inspection(inspection_id)
    require_assigned_inspector(actor, inspection)
    if current_status(inspection) in TERMINAL_STATUSES:
        raise InvalidStateError("Проверка закрыта")
    return await mgr.remove_photo(inspection_id, ref)


async def delete_inspection(
    session: AsyncSession, actor: User, inspection_id: str, store: Optional[DocumentStore] = None
) -> None:
    """Удаление администратором: каскадом уходят пункты, фото и отчёт."""

    require_role(actor, UserRole.ADMIN)
    reports = ReportManager(session)
    report = await reports.get_by_inspection(inspection_id)
    if report is not None:
        document_ref = report.document_ref
        await reports.delete_report(report.id)
        if store is not None:
            run_after_commit(session, lambda: store.delete(document_ref))
    await InspectionManager(session).delete_inspection(inspection_id)
    logger.info("Inspection %s deleted by admin %s", inspection_id, actor.id)
