# Руководство к файлу (ROUTES/users.py)
# Назначение:
# - Эндпоинты пользователей ProCheck поверх БД (SQLAlchemy async).
# - Реализует: POST /users, GET /users, GET /users/me, GET /users/{id},
#             POST /users/me/password, PATCH /users/{id}/profile, DELETE /users/{id}.

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_actor
from ..schemas import OkResponse, PasswordChangeRequest, ProfileUpdateRequest, UserCreateRequest, UserResponse
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES import user_service


router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse)
async def create_user(
    payload: UserCreateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    profile = payload.profile.model_dump() if payload.profile else {}
    return await user_service.create_user(
        session,
        actor,
        username=payload.username,
        password=payload.password,
        role=payload.role,
        full_name=payload.full_name,
        profile=profile,
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[str] = None,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await user_service.list_users(session, role)


@router.get("/me", response_model=UserResponse)
async def get_me(actor: User = Depends(get_current_actor)):
    return actor


@router.post("/me/password", response_model=OkResponse)
async def change_password(
    payload: PasswordChangeRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await user_service.change_password(
        session,
        actor,
        current_password=payload.current_password,
        new_password=payload.new_password,
        confirm_password=payload.confirm_password,
    )
    return OkResponse()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await user_service.get_user(session, user_id)


@router.patch("/{user_id}/profile", response_model=UserResponse)
async def update_profile(
    user_id: str,
    payload: ProfileUpdateRequest,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await user_service.update_profile(session, actor, user_id, payload.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=OkResponse)
async def delete_user(
    user_id: str,
    actor: User = Depends(get_current_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await user_service.delete_user(session, actor, user_id)
    return OkResponse()
