from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from typing import Optional
import uuid
from datetime import datetime

from app.domains.documents.entities import DocumentStatus
from app.domains.sharing.entities import SharePermission, to_naive_utc


class ShareCreate(BaseModel):
    """Схема для создания ссылки доступа"""
    permission: SharePermission = SharePermission.VIEW
    expires_at: Optional[datetime] = None
    password: Optional[str] = Field(None, max_length=128)
    message: Optional[str] = Field(None, max_length=2000)
    shared_with_email: Optional[EmailStr] = None

    @field_validator('expires_at')
    @classmethod
    def normalize_expiry(cls, v):
        return to_naive_utc(v)

    @field_validator('password')
    @classmethod
    def empty_password_is_none(cls, v):
        return v or None


class ShareUpdate(BaseModel):
    """Схема для частичного обновления ссылки; null снимает срок или пароль"""
    permission: Optional[SharePermission] = None
    expires_at: Optional[datetime] = None
    password: Optional[str] = Field(None, max_length=128)

    @field_validator('permission')
    @classmethod
    def permission_not_null(cls, v):
        if v is None:
            raise ValueError('Permission cannot be null')
        return v

    @field_validator('expires_at')
    @classmethod
    def normalize_expiry(cls, v):
        return to_naive_utc(v)

    @field_validator('password')
    @classmethod
    def empty_password_is_none(cls, v):
        return v or None


class ShareResponse(BaseModel):
    """Схема для ответа с данными ссылки; пароль не возвращается"""
    uuid: uuid.UUID
    document_id: uuid.UUID
    access_token: str
    share_url: str
    permission: SharePermission
    shared_by_user_id: str
    shared_with_email: Optional[str]
    has_password: bool
    expires_at: Optional[datetime]
    is_expired: bool
    view_count: int
    last_viewed_at: Optional[datetime]
    message: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, share, share_url: str) -> "ShareResponse":
        return cls(
            uuid=share.uuid,
            document_id=share.document_id,
            access_token=share.access_token,
            share_url=share_url,
            permission=share.permission,
            shared_by_user_id=share.shared_by_user_id,
            shared_with_email=share.shared_with_email,
            has_password=share.has_password,
            expires_at=share.expires_at,
            is_expired=share.is_expired(),
            view_count=share.view_count,
            last_viewed_at=share.last_viewed_at,
            message=share.message,
            created_at=share.created_at
        )


class SharedDocumentSnapshot(BaseModel):
    uuid: uuid.UUID
    title: str
    content: str
    status: DocumentStatus
    created_at: datetime
    updated_at: datetime


class SharedDocumentResponse(BaseModel):
    """Схема для ответа анонимному получателю ссылки"""
    document: SharedDocumentSnapshot
    permission: SharePermission
    message: Optional[str]
    shared_at: datetime
    share_id: uuid.UUID
    view_count: int


class SharedDocumentEdit(BaseModel):
    """Схема для изменения документа по ссылке с правом EDIT"""
    content: str = Field(..., max_length=1000000)


class SharedDocumentEditResponse(BaseModel):
    success: bool = True
    updated_at: datetime
