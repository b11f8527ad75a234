# Руководство к файлу (FAST_API/schemas.py)
# Назначение:
# - Централизованные Pydantic-схемы запросов/ответов FastAPI для ProCheck.
# - Ответы строятся из ORM-объектов (from_attributes), поля в snake_case.
# Важно:
# - Пароли и их хэши не попадают ни в одну схему ответа.

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class OkResponse(BaseModel):
    ok: bool = True


# --------------------------- Users ---------------------------

class UserProfile(BaseModel):
    specialization: Optional[str] = None
    work_hours: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    avatar_ref: Optional[str] = None


class ProfileUpdateRequest(UserProfile):
    full_name: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str
    full_name: str = Field(..., min_length=1)
    profile: Optional[UserProfile] = None


class UserResponse(ORMModel):
    id: str
    username: str
    role: str
    full_name: str
    specialization: Optional[str] = None
    work_hours: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    avatar_ref: Optional[str] = None


# --------------------------- Auth ---------------------------

class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: UserResponse
    last_login: Optional[datetime] = None


class SessionResponse(BaseModel):
    current_user_id: Optional[str] = None
    last_login: Optional[datetime] = None


# --------------------------- Templates ---------------------------

class TemplateItemResponse(ORMModel):
    id: str
    text: str


class TemplateCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    items: List[str]


class TemplateUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    items: Optional[List[str]] = None


class TemplateResponse(ORMModel):
    id: str
    title: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    updated_at: datetime
    items: List[TemplateItemResponse]


# --------------------------- Inspections ---------------------------

class CheckItemResponse(ORMModel):
    id: str
    text: str
    status: str


class PhotoResponse(ORMModel):
    id: str
    ref: str


class InspectionCreateRequest(BaseModel):
    title: str
    type: str
    enterprise_name: str
    enterprise_address: str
    plan_date: datetime
    report_due_date: datetime
    template_id: Optional[str] = None
    check_items: Optional[List[str]] = None
    photos: List[str] = Field(default_factory=list)


class InspectionUpdateRequest(BaseModel):
    title: Optional[str] = None
    type: Optional[str] = None
    enterprise_name: Optional[str] = None
    enterprise_address: Optional[str] = None
    plan_date: Optional[datetime] = None
    report_due_date: Optional[datetime] = None
    check_items: Optional[List[str]] = None


class InspectionAssignRequest(BaseModel):
    inspector_id: str
    plan_date: Optional[datetime] = None


class CheckItemStatusRequest(BaseModel):
    status: str


class PhotoRequest(BaseModel):
    ref: str


class InspectionResponse(ORMModel):
    id: str
    title: str
    type: str
    customer_id: Optional[str] = None
    template_id: Optional[str] = None
    created_at: datetime
    enterprise_name: str
    enterprise_address: str
    plan_date: datetime
    report_due_date: datetime
    status: str
    assigned_inspector_id: Optional[str] = None
    approved_by_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    report_id: Optional[str] = None
    check_items: List[CheckItemResponse]
    photos: List[PhotoResponse]


class InspectionsPage(BaseModel):
    items: List[InspectionResponse]
    total: int
    page: int
    pages: int


# --------------------------- Reports ---------------------------

class ReportCreateRequest(BaseModel):
    inspection_id: str
    document_ref: Optional[str] = None


class ReportResponse(ORMModel):
    id: str
    inspection_id: str
    created_by: Optional[str] = None
    customer_id: Optional[str] = None
    created_at: datetime
    document_ref: str
    editable_until: datetime
    locked: bool


# --------------------------- Chats ---------------------------

class ChatCreateRequest(BaseModel):
    participant_ids: List[str]
    title: Optional[str] = None


class MessageRequest(BaseModel):
    text: str


class MessageResponse(ORMModel):
    id: str
    chat_id: str
    author_id: Optional[str] = None
    text: str
    created_at: datetime


class ChatResponse(BaseModel):
    id: str
    title: Optional[str] = None
    created_at: datetime
    participant_ids: List[str]
    messages: List[MessageResponse] = Field(default_factory=list)


# --------------------------- Account requests ---------------------------

class AccountRequestCreate(BaseModel):
    username: str
    password: str
    role: str
    purpose: str = ""


class AccountRequestResponse(ORMModel):
    id: str
    username: str
    role: str
    purpose: str
    requested_at: datetime
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None


# --------------------------- Database management ---------------------------

class BulkDeleteResponse(BaseModel):
    deleted: int


class ClearDatabaseResponse(BaseModel):
    reports: int
    inspections: int
    chat_messages: int
    chats: int
    templates: int
    account_requests: int
    users: int


# --------------------------- System ---------------------------

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str


class ErrorResponse(BaseModel):
    detail: str
    code: str
