# Руководство к файлу
# Назначение: доменные сервисы ProCheck (не зависят от FastAPI, работают с AsyncSession).

from . import (
    account_request_service,
    auth_service,
    chat_service,
    database_admin_service,
    inspection_service,
    report_service,
    template_service,
    user_service,
)
from .document_store import DocumentStore

__all__ = [
    "account_request_service",
    "auth_service",
    "chat_service",
    "database_admin_service",
    "inspection_service",
    "report_service",
    "template_service",
    "user_service",
    "DocumentStore",
]
