# Руководство к файлу (ROUTES/auth.py)
# Назначение:
# - Вход/выход и текущая сессия ProCheck.
# - Реализует: POST /auth/login, POST /auth/logout, GET /auth/session.

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas import LoginRequest, LoginResponse, OkResponse, SessionResponse, UserResponse
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.SERVICES import auth_service


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_db_session)):
    user = await auth_service.login(session, payload.username, payload.password)
    snapshot = await auth_service.current_session(session)
    return LoginResponse(user=UserResponse.model_validate(user), last_login=snapshot.last_login)


@router.post("/logout", response_model=OkResponse)
async def logout(session: AsyncSession = Depends(get_db_session)):
    await auth_service.logout(session)
    return OkResponse()


@router.get("/session", response_model=SessionResponse)
async def current_session(session: AsyncSession = Depends(get_db_session)):
    snapshot = await auth_service.current_session(session)
    return SessionResponse(current_user_id=snapshot.current_user_id, last_login=snapshot.last_login)
