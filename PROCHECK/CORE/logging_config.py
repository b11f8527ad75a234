# Руководство к файлу (CORE/logging_config.py)
# Назначение:
# - Централизованная настройка логирования для бэкенда ProCheck.
# - Определяет формат логов и базовые именованные логгеры `procheck.*`.
# Важно:
# - Модуль не зависит от FastAPI, его можно вызывать из приложения, тестов и скриптов.

from __future__ import annotations

import logging
import sys
from typing import Iterable


def _configure_handler(formatter: logging.Formatter) -> logging.Handler:
    """Создаёт stdout-обработчик с заданным форматтером."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: int = logging.INFO, extra_loggers: Iterable[str] | None = None) -> None:
    """Настраивает базовое логирование для ProCheck.

    Формат сообщения:
      [2025-01-01 10:00:00] [INFO] [module:function:line] message

    Повторный вызов безопасен: обработчики root-логгера очищаются
    и инициализируются заново.
    """

    formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)

    # Удаляем старые обработчики, чтобы избежать дублирования
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(_configure_handler(formatter))

    # Базовые доменные логгеры ProCheck
    for name in [
        "procheck.db",
        "procheck.auth",
        "procheck.users",
        "procheck.templates",
        "procheck.inspections",
        "procheck.reports",
        "procheck.chats",
        "procheck.account_requests",
        "procheck.documents",
        "procheck.policy",
        "procheck.admin",
        "procheck.fastapi",
    ]:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.propagate = True  # отдаём в root, который пишет в stdout

    if extra_loggers:
        for name in extra_loggers:
            lg = logging.getLogger(name)
            lg.setLevel(level)
            lg.propagate = True


__all__ = ["setup_logging"]
