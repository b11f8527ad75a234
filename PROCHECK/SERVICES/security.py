"""Руководство к файлу (PROCHECK/SERVICES/security.py)
Назначение:
- Хэширование паролей с солью и проверка через werkzeug.security.
- Метод хэширования задаётся настройкой password_hash_method (по умолчанию scrypt).
"""

from __future__ import annotations

import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from PROCHECK.CORE.config import settings


MIN_PASSWORD_LENGTH = 4


def hash_password(password: str, *, method: str | None = None) -> str:
    return generate_password_hash(password, method=method or settings.password_hash_method)


def verify_password(password: str, stored: str) -> bool:
    """Проверить пароль против сохранённого хэша.

    Испорченная строка хэша или неизвестный метод дают False, а не исключение.
    """

    try:
        return check_password_hash(stored, password)
    except (ValueError, TypeError):
        return False


# Хэш-заглушка для выравнивания времени ответа, когда пользователь не найден
_DUMMY_HASH: str | None = None


def dummy_verify(password: str) -> None:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password(secrets.token_hex(8))
    verify_password(password, _DUMMY_HASH)
