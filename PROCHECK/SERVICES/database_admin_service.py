"""Руководство к файлу (PROCHECK/SERVICES/database_admin_service.py)
Назначение:
- Массовое удаление данных администратором (экран «Управление БД»):
  пользователи, проверки, отчёты, сообщения, чаты, шаблоны, заявки на доступ; полная очистка.
Важно:
- Администратор, выполняющий операцию, не удаляется: иначе войти будет некому.
- Удаление отчётов всегда сбрасывает report_id у проверок; статусы не меняются.
- Файлы документов стираются только после коммита транзакции.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.types import UserRole
from PROCHECK.DATABASE.CACHE_MANAGER import (
    AccountRequestManager,
    ChatManager,
    InspectionManager,
    ReportManager,
    TemplateManager,
    UserManager,
)
from PROCHECK.DATABASE.models import User
from PROCHECK.DATABASE.session import run_after_commit
from .document_store import DocumentStore
from .policy import require_role


logger = logging.getLogger("procheck.admin")


def _drop_documents_after_commit(session: AsyncSession, store: Optional[DocumentStore], refs: Iterable[str]) -> None:
    if store is None:
        return
    refs = list(refs)

    def _drop() -> None:
        for ref in refs:
            store.delete(ref)

    run_after_commit(session, _drop)


async def _delete_reports(session: AsyncSession, store: Optional[DocumentStore]) -> int:
    refs = await ReportManager(session).delete_all()
    await InspectionManager(session).clear_report_links()
    _drop_documents_after_commit(session, store, refs)
    return len(refs)


async def delete_all_users(session: AsyncSession, admin: User) -> int:
    """Удалить всех пользователей, кроме самого администратора."""

    require_role(admin, UserRole.ADMIN)
    deleted = await UserManager(session).delete_all_except(admin.id)
    logger.warning("All users except %s deleted: %d", admin.id, deleted)
    return deleted


async def delete_all_reports(session: AsyncSession, admin: User, store: Optional[DocumentStore] = None) -> int:
    require_role(admin, UserRole.ADMIN)
    deleted = await _delete_reports(session, store)
    logger.warning("All reports deleted by %s: %d", admin.id, deleted)
    return deleted


async def delete_all_inspections(session: AsyncSession, admin: User, store: Optional[DocumentStore] = None) -> int:
    """Удалить все проверки вместе с их отчётами, пунктами и фото."""

    require_role(admin, UserRole.ADMIN)
    await _delete_reports(session, store)
    deleted = await InspectionManager(session).delete_all()
    logger.warning("All inspections deleted by %s: %d", admin.id, deleted)
    return deleted


async def delete_all_chat_messages(session: AsyncSession, admin: User) -> int:
    require_role(admin, UserRole.ADMIN)
    deleted = await ChatManager(session).delete_all_messages()
    logger.warning("All chat messages deleted by %s: %d", admin.id, deleted)
    return deleted


async def delete_all_chats(session: AsyncSession, admin: User) -> int:
    """Удалить все чаты; сообщения, участники и скрытия уходят каскадом."""

    require_role(admin, UserRole.ADMIN)
    deleted = await ChatManager(session).delete_all()
    logger.warning("All chats deleted by %s: %d", admin.id, deleted)
    return deleted


async def delete_all_templates(session: AsyncSession, admin: User) -> int:
    require_role(admin, UserRole.ADMIN)
    deleted = await TemplateManager(session).delete_all()
    logger.warning("All templates deleted by %s: %d", admin.id, deleted)
    return deleted


async def delete_all_account_requests(session: AsyncSession, admin: User) -> int:
    require_role(admin, UserRole.ADMIN)
    deleted = await AccountRequestManager(session).delete_all()
    logger.warning("All account requests deleted by %s: %d", admin.id, deleted)
    return deleted


async def clear_database(session: AsyncSession, admin: User, store: Optional[DocumentStore] = None) -> Dict[str, int]:
    """Полная очистка данных; остаётся только учётная запись администратора."""

    require_role(admin, UserRole.ADMIN)
    chats = ChatManager(session)
    counts = {
        "reports": await _delete_reports(session, store),
        "inspections": await InspectionManager(session).delete_all(),
        "chat_messages": await chats.delete_all_messages(),
        "chats": await chats.delete_all(),
        "templates": await TemplateManager(session).delete_all(),
        "account_requests": await AccountRequestManager(session).delete_all(),
        "users": await UserManager(session).delete_all_except(admin.id),
    }
    logger.warning("Database cleared by %s: %s", admin.id, counts)
    return counts
