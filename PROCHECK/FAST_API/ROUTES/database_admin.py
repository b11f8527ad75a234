# Руководство к файлу (ROUTES/database_admin.py)
# Назначение:
# - Управление БД администратором: массовое удаление данных.
# - Реализует: DELETE /admin/database/users, /inspections, /reports, /chat-messages,
#             /chats, /templates, /account-requests,
#             DELETE /admin/database (полная очистка).

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor, get_document_store
from ..schemas import BulkDeleteResponse, ClearDatabaseResponse
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import database_admin_service
from PROCHECK.SERVICES.document_store import DocumentStore


router = APIRouter(prefix="/admin/database", tags=["admin"])


@router.delete("/users", response_model=BulkDeleteResponse)
async def delete_all_users(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_users(session, actor))


@router.delete("/inspections", response_model=BulkDeleteResponse)
async def delete_all_inspections(
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_inspections(session, actor, store))


@router.delete("/reports", response_model=BulkDeleteResponse)
async def delete_all_reports(
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_reports(session, actor, store))


@router.delete("/chat-messages", response_model=BulkDeleteResponse)
async def delete_all_chat_messages(
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_chat_messages(session, actor))


@router.delete("/chats", response_model=BulkDeleteResponse)
async def delete_all_chats(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_chats(session, actor))


@router.delete("/templates", response_model=BulkDeleteResponse)
async def delete_all_templates(actor: User = Depends(get_current_actor), session: AsyncSession = Depends(get_db_session)):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_templates(session, actor))


@router.delete("/account-requests", response_model=BulkDeleteResponse)
async def delete_all_account_requests(
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return BulkDeleteResponse(deleted=await database_admin_service.delete_all_account_requests(session, actor))


@router.delete("", response_model=ClearDatabaseResponse)
async def clear_database(
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
    store: DocumentStore = Depends(get_document_store),
):
    counts = await database_admin_service.clear_database(session, actor, store)
    return ClearDatabaseResponse(**counts)
