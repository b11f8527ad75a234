# Руководство к файлу (FAST_API/deps.py)
# Назначение:
# - Общие зависимости роутеров: текущий пользователь по заголовку X-User-Id
#   и хранилище документов отчётов.

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from PROCHECK.CORE.config import settings
from PROCHECK.DATABASE.session import get_db_session
from PROCHECK.DATABASE.CACHE_MANAGER import UserManager
from PROCHECK.DATABASE.models import User
from PROCHECK.SERVICES.document_store import DocumentStore


async def get_current_actor(
    x_user_id: Optional[str] = Header(None),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    if not x_user_id:
        raise HTTPException(401, "Missing X-User-Id header")
    user = await UserManager(session).get_user(x_user_id)
    if user is None:
        raise HTTPException(401, "Unknown user")
    return user


def get_document_store() -> DocumentStore:
    return DocumentStore(Path(settings.storage_dir) / "reports")
