# Руководство к файлу (SERVICES/policy.py)
# Назначение:
# - Проверки прав актора: роль и, где нужно, личность (владелец, назначенный инспектор).
# - Ортогональны машине состояний: сервисы вызывают их до применения перехода.

from __future__ import annotations

import logging

from PROCHECK.CORE.errors import UnauthorizedError
from PROCHECK.CORE.types import UserRole
from PROCHECK.DATABASE.models import Inspection, User


logger = logging.getLogger("procheck.policy")


def require_role(actor: User, *roles: UserRole) -> None:
    allowed = {r.value for r in roles}
    if actor.role not in allowed:
        logger.warning("actor=%s role=%s denied, required one of %s", actor.id, actor.role, sorted(allowed))
        raise UnauthorizedError(f"Роль {actor.role} не может выполнить это действие")


def require_owner(actor: User, inspection: Inspection) -> None:
    """Только заказчик, создавший проверку."""
    require_role(actor, UserRole.CUSTOMER)
    if inspection.customer_id != actor.id:
        logger.warning("actor=%s is not owner of inspection=%s", actor.id, inspection.id)
        raise UnauthorizedError("Проверка принадлежит другому заказчику")


def require_assigned_inspector(actor: User, inspection: Inspection) -> None:
    require_role(actor, UserRole.INSPECTOR)
    if inspection.assigned_inspector_id != actor.id:
        logger.warning("actor=%s is not assigned to inspection=%s", actor.id, inspection.id)
        raise UnauthorizedError("Проверка назначена другому инспектору")


def can_view_inspection(actor: User, inspection: Inspection) -> bool:
    if actor.role in (UserRole.ADMIN.value, UserRole.SENIOR_INSPECTOR.value):
        return True
    if actor.role == UserRole.CUSTOMER.value:
        return inspection.customer_id == actor.id
    return inspection.assigned_inspector_id == actor.id


def require_view_inspection(actor: User, inspection: Inspection) -> None:
    if not can_view_inspection(actor, inspection):
        raise UnauthorizedError("Нет доступа к проверке")
