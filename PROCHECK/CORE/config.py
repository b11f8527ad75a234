# Руководство к файлу (CORE/config.py)
# Назначение:
# - Централизованные настройки ProCheck (FastAPI-приложение, сервисы, хранилище отчётов).
# Важно:
# - Директории storage/logs создаются автоматически.
# - Все значения можно переопределить через переменные окружения с префиксом PROCHECK_.

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Базовые настройки ProCheck."""

    model_config = SettingsConfigDict(env_prefix="PROCHECK_", extra="ignore")

    app_name: str = Field("ProCheck API", description="Название приложения")
    version: str = Field("0.1.0", description="Версия API")

    base_dir: str = Field(default=str(_BASE_DIR), description="Базовая директория")

    # Каталоги для хранения
    storage_dir: str = Field(default=str(_BASE_DIR / "storage"), description="Документы отчётов")
    logs_dir: str = Field(default=str(_BASE_DIR / "logs"), description="Логи")

    # CORS
    cors_origins: str = Field(default="http://localhost:8081,http://127.0.0.1:8081", description="Разрешённые Origin")

    # Хэширование паролей: метод werkzeug.security.generate_password_hash
    password_hash_method: str = Field(default="scrypt", description="Например scrypt или pbkdf2:sha256:600000")

    # Заполнять пустую БД пользователями и шаблонами по умолчанию
    seed_defaults: bool = Field(default=True)


def _ensure_dirs(*paths: str) -> None:
    for p in paths:
        Path(p).mkdir(parents=True, exist_ok=True)


settings = Settings()  # type: ignore[call-arg]
_ensure_dirs(settings.storage_dir, settings.logs_dir)
