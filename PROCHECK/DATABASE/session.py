# Руководство к файлу (DATABASE/session.py)
# Назначение:
# - Асинхронная настройка SQLAlchemy: движок, фабрика сессий, зависимость get_db_session.
# - По умолчанию SQLite (aiosqlite), для Docker/Postgres используется URL из окружения.
# Важно:
# - URL БД берётся из PROCHECK_DATABASE_URL (приоритет), затем DB_URL, иначе локальный sqlite.
# - Для SQLite включаются внешние ключи (PRAGMA foreign_keys), иначе каскады не работают.
# - Одна сессия = одна транзакция: многострочные записи (отчёт + проверка,
#   одобрение заявки + пользователь + чат) фиксируются вместе или откатываются.
# - Файлы документов меняются только вместе с транзакцией: run_after_commit / run_after_rollback.

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Callable

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_SQLITE_PATH = Path(__file__).resolve().parent / "procheck.sqlite3"
DEFAULT_DB_URL = f"sqlite+aiosqlite:///{DEFAULT_SQLITE_PATH}"

DB_URL = os.getenv("PROCHECK_DATABASE_URL") or os.getenv("DB_URL") or DEFAULT_DB_URL


def _enable_sqlite_fk(dbapi_connection, connection_record) -> None:  # noqa: ARG001
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str) -> AsyncEngine:
    eng = create_async_engine(url, echo=False, future=True)
    if eng.dialect.name == "sqlite":
        event.listen(eng.sync_engine, "connect", _enable_sqlite_fk)
    return eng


def make_session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


_ON_COMMIT = "procheck_on_commit"
_ON_ROLLBACK = "procheck_on_rollback"


def run_after_commit(session: AsyncSession, action: Callable[[], object]) -> None:
    """Выполнить action после успешного коммита текущей транзакции (при откате забывается)."""
    session.info.setdefault(_ON_COMMIT, []).append(action)


def run_after_rollback(session: AsyncSession, action: Callable[[], object]) -> None:
    """Выполнить action, если текущая транзакция будет откачена (при коммите забывается)."""
    session.info.setdefault(_ON_ROLLBACK, []).append(action)


@event.listens_for(Session, "after_commit")
def _after_commit(session: Session) -> None:
    session.info.pop(_ON_ROLLBACK, None)
    for action in session.info.pop(_ON_COMMIT, []):
        action()


@event.listens_for(Session, "after_rollback")
def _after_rollback(session: Session) -> None:
    session.info.pop(_ON_COMMIT, None)
    for action in session.info.pop(_ON_ROLLBACK, []):
        action()


engine = make_engine(DB_URL)

async_session_factory = make_session_factory(engine)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency function that yields an async DB session.
    Коммит/роллбек управляется здесь для простоты использования в FastAPI.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
