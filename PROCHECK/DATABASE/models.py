# Руководство к файлу (DATABASE/models.py)
# Назначение:
# - SQLAlchemy-модели БД ProCheck: USERS, TEMPLATES, INSPECTIONS, REPORTS, CHATS,
#   ACCOUNT_REQUESTS и дочерние таблицы (пункты, фото, участники, сообщения, скрытия).
# - Совместимы с SQLite (dev) и Postgres (prod) без изменений моделей.
# Важно:
# - PK: строковые id вида "<prefix>-<uuid4 hex>", префикс задаётся ID_PREFIX модели.
# - Время хранится в UTC без tzinfo.
# - Inspection.report_id: производный указатель; авторитетная связь Report.inspection_id.

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(value: datetime) -> datetime:
    """Привести время к UTC без tzinfo (наивное время считается уже UTC)."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"
    ID_PREFIX = "user"

    id = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False)
    # Логин в нижнем регистре (Python str.lower): SQLite lower() не понимает кириллицу
    username_lower = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(512), nullable=False)
    role = Column(String(32), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    # Профиль
    specialization = Column(String(255), nullable=True)
    work_hours = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    email = Column(String(255), nullable=True)
    avatar_ref = Column(String(1024), nullable=True)


class Template(Base):
    __tablename__ = "templates"
    ID_PREFIX = "template"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    items = relationship(
        "TemplateItem",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="TemplateItem.position",
        lazy="selectin",
    )


class TemplateItem(Base):
    __tablename__ = "template_items"
    ID_PREFIX = "titem"

    id = Column(String(64), primary_key=True)
    template_id = Column(String(64), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)

    template = relationship("Template", back_populates="items")


class Inspection(Base):
    __tablename__ = "inspections"
    ID_PREFIX = "inspection"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    type = Column(String(255), nullable=False)
    customer_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    # Только происхождение: шаблон копируется, а не связывается
    template_id = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    enterprise_name = Column(String(255), nullable=False)
    enterprise_address = Column(String(1024), nullable=False)
    plan_date = Column(DateTime, nullable=False)
    report_due_date = Column(DateTime, nullable=False)
    status = Column(String(64), nullable=False)
    assigned_inspector_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    approved_by_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    report_id = Column(String(64), nullable=True)

    check_items = relationship(
        "CheckItem",
        back_populates="inspection",
        cascade="all, delete-orphan",
        order_by="CheckItem.position",
        lazy="selectin",
    )
    photos = relationship(
        "InspectionPhoto",
        back_populates="inspection",
        cascade="all, delete-orphan",
        order_by="InspectionPhoto.position",
        lazy="selectin",
    )


class CheckItem(Base):
    __tablename__ = "check_items"
    ID_PREFIX = "check"

    id = Column(String(64), primary_key=True)
    inspection_id = Column(String(64), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)
    status = Column(String(64), nullable=False)

    inspection = relationship("Inspection", back_populates="check_items")


class InspectionPhoto(Base):
    __tablename__ = "inspection_photos"
    ID_PREFIX = "photo"

    id = Column(String(64), primary_key=True)
    inspection_id = Column(String(64), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    ref = Column(String(2048), nullable=False)

    inspection = relationship("Inspection", back_populates="photos")


class Report(Base):
    __tablename__ = "reports"
    ID_PREFIX = "report"

    id = Column(String(64), primary_key=True)
    inspection_id = Column(String(64), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    # Копия inspection.customer_id на момент создания
    customer_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    document_ref = Column(String(2048), nullable=False)
    editable_until = Column(DateTime, nullable=False)
    locked = Column(Boolean, nullable=False, default=True)


class Chat(Base):
    __tablename__ = "chats"
    ID_PREFIX = "chat"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    participants = relationship(
        "ChatParticipant",
        back_populates="chat",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    messages = relationship(
        "ChatMessage",
        back_populates="chat",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
        lazy="selectin",
    )
    hidden_for = relationship(
        "ChatDeletedFor",
        back_populates="chat",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ChatParticipant(Base):
    __tablename__ = "chat_participants"

    chat_id = Column(String(64), ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    chat = relationship("Chat", back_populates="participants")


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    ID_PREFIX = "msg"

    id = Column(String(64), primary_key=True)
    chat_id = Column(String(64), ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    chat = relationship("Chat", back_populates="messages")


class ChatDeletedFor(Base):
    """Скрытие чата для одного участника (удаление «только у себя»)."""

    __tablename__ = "chat_deleted_for"

    chat_id = Column(String(64), ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    chat = relationship("Chat", back_populates="hidden_for")


class AccountRequest(Base):
    __tablename__ = "account_requests"
    ID_PREFIX = "req"

    id = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False)
    username_lower = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(512), nullable=False)
    role = Column(String(32), nullable=False)
    purpose = Column(Text, nullable=False, default="")
    requested_at = Column(DateTime, default=utcnow, nullable=False)
    status = Column(String(32), nullable=False, default="pending")
    reviewed_by = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)


class AuthState(Base):
    """Сохранённая сессия: единственная строка (current_user_id, last_login)."""

    __tablename__ = "auth_state"

    id = Column(Integer, primary_key=True)
    current_user_id = Column(String(64), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    last_login = Column(DateTime, nullable=True)


# Индексы для типичных фильтров
Index("ix_inspections_status_plan", Inspection.status, Inspection.plan_date)
Index("ix_inspections_customer_created", Inspection.customer_id, Inspection.created_at)
Index("ix_account_requests_status", AccountRequest.status)
