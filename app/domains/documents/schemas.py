from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
import uuid
from datetime import datetime

from app.domains.documents.entities import DocumentStatus, ChangeType


class DocumentCreate(BaseModel):
    """Схема для создания документа; пропущенные поля получают значения по умолчанию"""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)  # 1MB max content
    status: Optional[DocumentStatus] = None
    document_type: Optional[str] = Field(None, max_length=100)
    jurisdiction: Optional[str] = Field(None, max_length=100)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return v.strip() if v else v


class DocumentUpdate(BaseModel):
    """Схема для обновления документа: меняются только переданные поля"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)
    status: Optional[DocumentStatus] = None
    document_type: Optional[str] = Field(None, min_length=1, max_length=100)
    jurisdiction: Optional[str] = Field(None, max_length=100)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is None:
            raise ValueError('Title cannot be null')
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()

    @field_validator('content', 'status', 'document_type')
    @classmethod
    def validate_not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    uuid: uuid.UUID
    title: str
    content: str
    status: DocumentStatus
    document_type: str
    jurisdiction: Optional[str]
    user_id: str
    organization_id: str
    created_at: datetime
    updated_at: datetime
    word_count: int
    content_length: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, document) -> "DocumentResponse":
        return cls(
            uuid=document.uuid,
            title=document.title,
            content=document.content,
            status=document.status,
            document_type=document.document_type,
            jurisdiction=document.jurisdiction,
            user_id=document.user_id,
            organization_id=document.organization_id,
            created_at=document.created_at,
            updated_at=document.updated_at,
            word_count=document.get_word_count(),
            content_length=document.get_content_length()
        )


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentResponse]
    filter: str
    page: int
    per_page: int


class DocumentVersionResponse(BaseModel):
    """Схема для ответа с данными версии документа"""
    uuid: uuid.UUID
    document_id: uuid.UUID
    version_number: int
    title: str
    content: str
    status: DocumentStatus
    change_type: ChangeType
    change_summary: str
    changed_fields: List[str]
    user_id: str
    user_name: Optional[str]
    user_avatar: Optional[str]
    audit_log_id: Optional[str]
    created_at: datetime
    word_count: int
    content_length: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, version) -> "DocumentVersionResponse":
        return cls(
            uuid=version.uuid,
            document_id=version.document_id,
            version_number=version.version_number,
            title=version.title,
            content=version.content,
            status=version.status,
            change_type=version.change_type,
            change_summary=version.change_summary,
            changed_fields=version.changed_fields,
            user_id=version.user_id,
            user_name=version.user_name,
            user_avatar=version.user_avatar,
            audit_log_id=version.audit_log_id,
            created_at=version.created_at,
            word_count=version.get_word_count(),
            content_length=version.get_content_length()
        )


class DocumentVersionListResponse(BaseModel):
    """Схема для истории версий документа"""
    document: DocumentResponse
    versions: List[DocumentVersionResponse]
    total_versions: int


class DocumentRestoreResponse(BaseModel):
    """Схема для ответа о восстановлении версии"""
    document: DocumentResponse
    restored_from: int
    version: DocumentVersionResponse


class DiffPart(BaseModel):
    value: str
    added: bool
    removed: bool


class DocumentCompareResponse(BaseModel):
    """Схема для ответа со сравнением версий"""
    document_id: uuid.UUID
    mode: str
    from_label: str
    to_label: str
    additions: int
    deletions: int
    unchanged: int
    parts: List[DiffPart]
