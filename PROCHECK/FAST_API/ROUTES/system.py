# Руководство к файлу (ROUTES/system.py)
# Назначение:
# - Системные эндпоинты ProCheck: /health.

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from PROCHECK.CORE.config import settings
from ..schemas import HealthResponse


router = APIRouter(tags=["system"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", timestamp=_now_iso(), version=settings.version)
