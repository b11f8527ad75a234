# Руководство к файлу (DATABASE/alembic.py)
# Назначение:
# - Минимальная инициализация БД ProCheck: создание таблиц по моделям и начальные данные
#   (пользователи по ролям, два шаблона, демонстрационная проверка, служебные чаты с администратором).
# - В dev режиме заменяет полноценный Alembic до внедрения миграций.
# Использование:
# - python -m PROCHECK.DATABASE.alembic  (создаст таблицы и загрузит данные по умолчанию)

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.orm import sessionmaker

from .session import engine, async_session_factory
from .models import (
    Base,
    Chat,
    ChatMessage,
    ChatParticipant,
    CheckItem,
    Inspection,
    Template,
    TemplateItem,
    User,
    utcnow,
)
from .CACHE_MANAGER.base_class import generate_id
from .CACHE_MANAGER.user import normalize_username


logger = logging.getLogger("procheck.db")

DEFAULT_USERS: List[Dict[str, Any]] = [
    {
        "id": "user-admin",
        "username": "admin",
        "password": "admin",
        "role": "admin",
        "full_name": "Администратор ProCheck",
        "specialization": "Управление системой",
        "work_hours": "09:00 - 18:00",
        "phone": "+7 (999) 000-00-00",
        "email": "admin@procheck.local",
    },
    {
        "id": "user-senior",
        "username": "stins",
        "password": "123",
        "role": "seniorInspector",
        "full_name": "Марина Старший Инспектор",
        "specialization": "Промышленная безопасность",
        "work_hours": "08:00 - 17:00",
        "phone": "+7 (999) 111-11-11",
        "email": "stins@procheck.local",
    },
    {
        "id": "user-inspector",
        "username": "ins",
        "password": "123",
        "role": "inspector",
        "full_name": "Иван Инспектор",
        "specialization": "Охрана труда",
        "work_hours": "10:00 - 19:00",
        "phone": "+7 (999) 222-22-22",
        "email": "ins@procheck.local",
    },
    {
        "id": "user-customer",
        "username": "zakaz",
        "password": "123",
        "role": "customer",
        "full_name": "ООО «ТехПро»",
        "specialization": "Заказчик проверок",
        "work_hours": "09:00 - 18:00",
        "phone": "+7 (999) 333-33-33",
        "email": "zakaz@procheck.local",
    },
]

DEFAULT_TEMPLATES: List[Dict[str, Any]] = [
    {
        "id": "template-fire",
        "title": "Пожарная безопасность",
        "description": "Контроль состояния систем пожарной безопасности на объекте",
        "items": [
            ("titem-fire-1", "Проверка огнетушителей и их сроков годности"),
            ("titem-fire-2", "Наличие схем эвакуации на видимых местах"),
            ("titem-fire-3", "Работоспособность автоматической пожарной сигнализации"),
        ],
    },
    {
        "id": "template-machinery",
        "title": "Техническое состояние станков",
        "description": "Плановая проверка оборудования механического цеха",
        "items": [
            ("titem-mach-1", "Состояние защитных кожухов и ограждений"),
            ("titem-mach-2", "Отсутствие посторонних вибраций и шумов"),
            ("titem-mach-3", "Проверка смазочных материалов и уровней"),
        ],
    },
]

ADMIN_GREETING = "Здравствуйте! Это служебный чат с администратором. Готов помочь."

SAMPLE_INSPECTION: Dict[str, Any] = {
    "id": "inspection-1",
    "title": "Пожарная безопасность в цехе №2",
    "type": "Пожарная безопасность",
    "customer_id": "user-customer",
    "template_id": "template-fire",
    "enterprise_name": "ООО «ТехПро»",
    "enterprise_address": "г. Москва, ул. Промышленная, д. 4",
}


async def create_tables(bind: Optional[AsyncEngine] = None) -> None:
    async with (bind or engine).begin() as conn:
        # Важно: run_sync для create_all в async режиме
        await conn.run_sync(Base.metadata.create_all)


async def seed_defaults(session_factory: Optional[sessionmaker] = None, *, sample_inspection: bool = True) -> bool:
    """Заполнить пустую БД. Возвращает False, если пользователи уже есть.

    sample_inspection: добавить демонстрационную проверку заказчика по шаблону
    пожарной безопасности в статусе «ожидает утверждения».
    """

    # Импорт здесь: security тянет настройки приложения
    from PROCHECK.SERVICES.security import hash_password

    factory = session_factory or async_session_factory
    async with factory() as session:
        exists = (await session.execute(select(User.id).limit(1))).first()
        if exists:
            return False

        admin_id = DEFAULT_USERS[0]["id"]
        senior_id = DEFAULT_USERS[1]["id"]
        users = [
            User(
                id=u["id"],
                username=u["username"],
                username_lower=normalize_username(u["username"]),
                password_hash=hash_password(u["password"]),
                role=u["role"],
                full_name=u["full_name"],
                specialization=u["specialization"],
                work_hours=u["work_hours"],
                phone=u["phone"],
                email=u["email"],
            )
            for u in DEFAULT_USERS
        ]
        session.add_all(users)
        await session.flush()

        for t in DEFAULT_TEMPLATES:
            session.add(
                Template(
                    id=t["id"],
                    title=t["title"],
                    description=t["description"],
                    created_by=senior_id,
                    updated_at=utcnow(),
                    items=[TemplateItem(id=item_id, position=idx, text=text) for idx, (item_id, text) in enumerate(t["items"])],
                )
            )

        if sample_inspection:
            now = utcnow()
            fire_items = DEFAULT_TEMPLATES[0]["items"]
            session.add(
                Inspection(
                    **SAMPLE_INSPECTION,
                    created_at=now,
                    plan_date=now + timedelta(days=7),
                    report_due_date=now + timedelta(days=14),
                    status="ожидает утверждения",
                    check_items=[
                        CheckItem(id=generate_id(CheckItem.ID_PREFIX), position=idx, text=text, status="не проверено")
                        for idx, (_, text) in enumerate(fire_items)
                    ],
                    photos=[],
                )
            )

        for u in DEFAULT_USERS[1:]:
            chat_id = f"chat-admin-{u['id']}"
            session.add(
                Chat(
                    id=chat_id,
                    title=f"Чат с администратором ({u['full_name']})",
                    created_at=utcnow(),
                    participants=[
                        ChatParticipant(chat_id=chat_id, user_id=admin_id),
                        ChatParticipant(chat_id=chat_id, user_id=u["id"]),
                    ],
                    messages=[
                        ChatMessage(
                            id=f"msg-welcome-{u['id']}",
                            chat_id=chat_id,
                            author_id=admin_id,
                            text=ADMIN_GREETING,
                            created_at=utcnow(),
                        )
                    ],
                    hidden_for=[],
                )
            )

        await session.commit()
        logger.info("Database seeded with %d users and %d templates", len(DEFAULT_USERS), len(DEFAULT_TEMPLATES))
        return True


async def main() -> None:
    await create_tables()
    await seed_defaults()


if __name__ == "__main__":
    asyncio.run(main())
