# Руководство к файлу (ROUTES/account_requests.py)
# Назначение:
# - Заявки на создание аккаунта: подача без входа, рассмотрение администратором.
# - Реализует: POST /account-requests, GET /account-requests,
#             POST /account-requests/{id}/approve, POST /account-requests/{id}/reject.

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor
from ..schemas import AccountRequestCreate, AccountRequestResponse, UserResponse
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import account_request_service


router = APIRouter(prefix="/account-requests", tags=["account-requests"])


@router.post("", response_model=AccountRequestResponse)
async def submit_request(payload: AccountRequestCreate, session: AsyncSession = Depends(get_db_session)):
    return await account_request_service.submit(
        session, payload.username, payload.password, payload.role, payload.purpose
    )


@router.get("", response_model=List[AccountRequestResponse])
async def list_requests(
    status: Optional[str] = None,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await account_request_service.list_requests(session, actor, status)


@router.post("/{request_id}/approve", response_model=UserResponse)
async def approve_request(
    request_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await account_request_service.approve(session, request_id, actor)


@router.post("/{request_id}/reject", response_model=AccountRequestResponse)
async def reject_request(
    request_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await account_request_service.reject(session, request_id, actor)
