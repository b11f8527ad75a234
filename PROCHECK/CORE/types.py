# Руководство к файлу (CORE/types.py)
# Назначение: перечисления домена ProCheck (роли, статусы проверок, пунктов, заявок).
# Значения совпадают с тем, что хранится в БД и отдаётся в API.

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet


class UserRole(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
    SENIOR_INSPECTOR = "seniorInspector"
    INSPECTOR = "inspector"


class CheckItemStatus(str, Enum):
    UNCHECKED = "не проверено"
    COMPLIANT = "соответствует"
    NON_COMPLIANT = "не соответствует"


class InspectionStatus(str, Enum):
    """Статусы проверки.

    DRAFT и APPROVED допустимы как значения, но ни один переход в них не ведёт.
    """

    DRAFT = "черновик"
    PENDING_APPROVAL = "ожидает утверждения"
    APPROVED = "утверждена"
    ASSIGNED = "назначена"
    IN_PROGRESS = "выполняется"
    COMPLETED = "завершена"
    CANCELLED = "отменена"


class AccountRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ChatDeleteScope(str, Enum):
    SELF = "self"
    ALL = "all"


TERMINAL_STATUSES: FrozenSet[InspectionStatus] = frozenset(
    {InspectionStatus.COMPLETED, InspectionStatus.CANCELLED}
)

# Пока проверка в этих статусах, заказчик может править пункты и описание
CUSTOMER_EDITABLE_STATUSES: FrozenSet[InspectionStatus] = frozenset(
    {InspectionStatus.DRAFT, InspectionStatus.PENDING_APPROVAL}
)

# Инспектор отмечает пункты только в работе
INSPECTOR_WORK_STATUSES: FrozenSet[InspectionStatus] = frozenset(
    {InspectionStatus.ASSIGNED, InspectionStatus.IN_PROGRESS}
)

# Группы для очереди старшего инспектора
STATUS_GROUPS: Dict[str, FrozenSet[InspectionStatus]] = {
    "pending": frozenset({InspectionStatus.PENDING_APPROVAL}),
    "assigned": frozenset({InspectionStatus.ASSIGNED, InspectionStatus.APPROVED}),
    "inProgress": frozenset({InspectionStatus.IN_PROGRESS}),
    "completed": frozenset({InspectionStatus.COMPLETED, InspectionStatus.CANCELLED}),
}
