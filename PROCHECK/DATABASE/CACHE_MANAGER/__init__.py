# Руководство к файлу
# Назначение: объявляет пакет PROCHECK.DATABASE.CACHE_MANAGER и экспортирует менеджеры.

from .base_class import BaseManager, generate_id
from .user import UserManager
from .template import TemplateManager
from .inspection import InspectionManager
from .report import ReportManager
from .chat import ChatManager
from .account_request import AccountRequestManager
from .auth import AuthStateManager

__all__ = [
    "BaseManager",
    "generate_id",
    "UserManager",
    "TemplateManager",
    "InspectionManager",
    "ReportManager",
    "ChatManager",
    "AccountRequestManager",
    "AuthStateManager",
]
