# Руководство к файлу (FAST_API/fast_api.py)
# Назначение:
# - Точка входа приложения FastAPI для ProCheck.
# - Подключение всех роутеров и базовая инфраструктура (CORS, логирование, ошибки).
# Важно:
# - Конфиг берётся из CORE/config.py.
# - Централизованное логирование настраивается через CORE/logging_config.setup_logging().
# - Доменные ошибки (ProcheckError) отдаются как {"detail": ..., "code": ...} со статусом из ошибки.
# - При старте создаются таблицы и, если включено, загружаются данные по умолчанию.

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from PROCHECK.CORE.config import settings
from PROCHECK.CORE.errors import ProcheckError
from PROCHECK.CORE.logging_config import setup_logging

# Загружаем переменные окружения из PROCHECK/.env до инициализации сервисов
_BASE_DIR = Path(__file__).resolve().parent.parent
_DOTENV_PATH = _BASE_DIR / ".env"
if _DOTENV_PATH.exists():  # в Docker .env можно не класть
    load_dotenv(dotenv_path=_DOTENV_PATH)

# Инициализируем централизованное логирование до создания FastAPI-приложения
setup_logging()

logger = logging.getLogger("procheck.fastapi")
logger.setLevel(logging.DEBUG)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from PROCHECK.DATABASE.alembic import create_tables, seed_defaults

    await create_tables()
    if settings.seed_defaults and await seed_defaults():
        logger.info("Default users and templates loaded")
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

# CORS
allow_origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"Request: {request.method} {request.url} actor={request.headers.get('x-user-id')}")
    ctype = request.headers.get("content-type", "")
    if ctype.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Request body: <invalid json>")
        else:
            if isinstance(body, dict) and "password" in body:
                body = {**body, "password": "***"}
            logger.debug(f"Request body: {json.dumps(body, ensure_ascii=False)[:1000]}")

    response = await call_next(request)
    return response

# Exception handlers
@app.exception_handler(ProcheckError)
async def procheck_exception_handler(request, exc: ProcheckError):
    logger.error(f"Domain error [{exc.code}]: {exc.message} for request: {request.url}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    logger.error(f"Validation error: {exc.errors()} for request: {request.url}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors()), "code": "validation_failed"})

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    logger.error(f"HTTP error: {exc.detail} for request: {request.url}, status: {exc.status_code}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": "http_error"})

# Routers
from .ROUTES import auth as auth_router  # noqa: E402
from .ROUTES import users as users_router  # noqa: E402
from .ROUTES import templates as templates_router  # noqa: E402
from .ROUTES import inspections as inspections_router  # noqa: E402
from .ROUTES import reports as reports_router  # noqa: E402
from .ROUTES import chats as chats_router  # noqa: E402
from .ROUTES import account_requests as account_requests_router  # noqa: E402
from .ROUTES import database_admin as database_admin_router  # noqa: E402
from .ROUTES import system as system_router  # noqa: E402

app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(templates_router.router)
app.include_router(inspections_router.router)
app.include_router(reports_router.router)
app.include_router(chats_router.router)
app.include_router(account_requests_router.router)
app.include_router(database_admin_router.router)
app.include_router(system_router.router)

@app.get("/")
async def root():
    return {"message": settings.app_name, "version": settings.version, "docs": "/docs"}
