# Руководство к файлу (CORE/errors.py)
# Назначение:
# - Иерархия доменных ошибок ProCheck.
# - Каждая ошибка несёт машинный code и HTTP-статус, который выставляет
#   обработчик исключений FastAPI (FAST_API/fast_api.py).
# Важно:
# - NotFound/Conflict: «ничего не произошло, попробуйте снова»;
#   Unauthorized/InvalidState: «так нельзя»; InvalidCredentials/ValidationFailed: «проверьте ввод».

from __future__ import annotations


class ProcheckError(Exception):
    """Базовое исключение домена ProCheck."""

    code = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ProcheckError):
    """Сущность с указанным id не существует."""

    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} не найден(а)")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ProcheckError):
    code = "conflict"
    status_code = 409


class InvalidStateError(ProcheckError):
    """Операция недопустима в текущем состоянии сущности."""

    code = "invalid_state"
    status_code = 409


class InvalidCredentialsError(ProcheckError):
    code = "invalid_credentials"
    status_code = 401

    def __init__(self, message: str = "Неверный логин или пароль") -> None:
        super().__init__(message)


class UnauthorizedError(ProcheckError):
    """Роль или личность актора не совпадает с требуемой для операции."""

    code = "unauthorized"
    status_code = 403


class ValidationFailedError(ProcheckError):
    code = "validation_failed"
    status_code = 422


class DocumentNotFoundError(NotFoundError):
    """Документ отчёта отсутствует в хранилище."""

    def __init__(self, ref: str) -> None:
        super().__init__("Документ", ref)


class DocumentStoreError(ProcheckError):
    """Ошибка ввода-вывода хранилища документов."""

    code = "document_store_error"
    status_code = 500


__all__ = [
    "ProcheckError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
    "InvalidCredentialsError",
    "UnauthorizedError",
    "ValidationFailedError",
    "DocumentNotFoundError",
    "DocumentStoreError",
]
