# Руководство к файлу (TESTS/conftest.py)
# Назначение:
# - Общие фикстуры для pytest-тестов backend ProCheck.
# - Каждый тест получает собственную SQLite-БД в tmp_path с пользователями и шаблонами по умолчанию,
#   сессию для сервисов и HTTP-клиент для FastAPI-приложения.
# Важно:
# - Переменные окружения выставляются до импорта PROCHECK: настройки читаются при импорте.

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path

_TMP_ROOT = Path(tempfile.mkdtemp(prefix="procheck-tests-"))
os.environ.setdefault("PROCHECK_PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")
os.environ.setdefault("PROCHECK_SEED_DEFAULTS", "false")
os.environ.setdefault("PROCHECK_STORAGE_DIR", str(_TMP_ROOT / "storage"))
os.environ.setdefault("PROCHECK_LOGS_DIR", str(_TMP_ROOT / "logs"))
os.environ.setdefault("PROCHECK_DATABASE_URL", f"sqlite+aiosqlite:///{_TMP_ROOT / 'unused.sqlite3'}")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from PROCHECK.DATABASE.alembic import create_tables, seed_defaults
from PROCHECK.DATABASE.models import User
from PROCHECK.DATABASE.session import get_db_session, make_engine, make_session_factory
from PROCHECK.FAST_API.deps import get_document_store
from PROCHECK.FAST_API.fast_api import app
from PROCHECK.SERVICES import inspection_service
from PROCHECK.SERVICES.document_store import DocumentStore
from PROCHECK.SERVICES.inspection_service import InspectionDraft


# id пользователей из данных по умолчанию
ADMIN_ID = "user-admin"
SENIOR_ID = "user-senior"
INSPECTOR_ID = "user-inspector"
CUSTOMER_ID = "user-customer"


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'procheck-test.sqlite3'}")
    await create_tables(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = make_session_factory(engine)
    # Без демонстрационной проверки: тесты считают проверки сами
    await seed_defaults(factory, sample_inspection=False)
    return factory


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def actors(session):
    """Пользователи по умолчанию, загруженные в тестовую сессию: role -> User."""

    return {
        "admin": await session.get(User, ADMIN_ID),
        "senior": await session.get(User, SENIOR_ID),
        "inspector": await session.get(User, INSPECTOR_ID),
        "customer": await session.get(User, CUSTOMER_ID),
    }


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "documents")


@pytest.fixture
def make_draft():
    def _make(**overrides) -> InspectionDraft:
        data = {
            "title": "Плановая проверка цеха №1",
            "type": "Пожарная безопасность",
            "enterprise_name": "ООО «ТехПро»",
            "enterprise_address": "г. Москва, ул. Заводская, 1",
            "plan_date": datetime(2025, 3, 10, 9, 0),
            "report_due_date": datetime(2025, 3, 20, 18, 0),
            "check_items": ["Огнетушители", "Схемы эвакуации"],
        }
        data.update(overrides)
        return InspectionDraft(**data)

    return _make


@pytest_asyncio.fixture
async def in_progress(session, actors, make_draft):
    """Проверка, прошедшая путь ожидает утверждения -> назначена -> выполняется."""

    inspection = await inspection_service.create_inspection(session, actors["customer"], make_draft())
    await inspection_service.assign_inspection(session, actors["senior"], inspection.id, INSPECTOR_ID)
    return await inspection_service.start_inspection(session, actors["inspector"], inspection.id)


@pytest_asyncio.fixture
async def http_client(session_factory, store):
    """HTTP-клиент для тестирования FastAPI-приложения без реального сервера."""

    async def _session_override():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_document_store] = lambda: store
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Заголовки запроса от имени пользователя."""

    def _headers(user_id: str) -> dict:
        return {"X-User-Id": user_id}

    return _headers
