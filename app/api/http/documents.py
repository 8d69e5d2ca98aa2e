from fastapi import APIRouter, Depends, status, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from app.core.auth import get_current_identity
from app.core.db import get_db
from app.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentListResponse,
    DocumentVersionResponse, DocumentVersionListResponse, DocumentRestoreResponse,
    DocumentCompareResponse
)
from app.domains.documents.services import DocumentService, DocumentVersionService
from app.domains.identity.entities import Identity

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового документа"""
    document_service = DocumentService(db)
    document = await document_service.create_document(document_data, identity)
    return DocumentResponse.from_entity(document)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    filter: str = Query("all", pattern="^(all|my|team)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка документов пользователя и организации"""
    document_service = DocumentService(db)

    offset = (page - 1) * per_page
    documents = await document_service.list_documents_for_viewer(
        identity,
        scope=filter,
        limit=per_page,
        offset=offset
    )

    return DocumentListResponse(
        documents=[DocumentResponse.from_entity(doc) for doc in documents],
        filter=filter,
        page=page,
        per_page=per_page
    )


@router.get("/{document_uuid}", response_model=DocumentResponse)
async def get_document(
    document_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение документа по UUID"""
    document = await DocumentService(db).get_document(document_uuid, identity)
    return DocumentResponse.from_entity(document)


@router.patch("/{document_uuid}", response_model=DocumentResponse)
async def update_document(
    document_uuid: uuid.UUID,
    update_data: DocumentUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Обновление документа; каждое сохранение создаёт версию"""
    document = await DocumentService(db).update_document(document_uuid, update_data, identity)
    return DocumentResponse.from_entity(document)


@router.delete("/{document_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Удаление документа"""
    await DocumentService(db).delete_document(document_uuid, identity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Версии документов
@router.get("/{document_uuid}/versions", response_model=DocumentVersionListResponse)
async def get_document_versions(
    document_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение версий документа, от новых к старым"""
    version_service = DocumentVersionService(db)

    versions = await version_service.list_versions(document_uuid, identity)
    document = await version_service.document_service.get_document(document_uuid, identity)

    return DocumentVersionListResponse(
        document=DocumentResponse.from_entity(document),
        versions=[DocumentVersionResponse.from_entity(version) for version in versions],
        total_versions=len(versions)
    )


@router.get("/{document_uuid}/versions/{version_uuid}", response_model=DocumentVersionResponse)
async def get_document_version(
    document_uuid: uuid.UUID,
    version_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение конкретной версии документа"""
    version = await DocumentVersionService(db).get_version(document_uuid, version_uuid, identity)
    return DocumentVersionResponse.from_entity(version)


@router.post("/{document_uuid}/versions/{version_uuid}/restore", response_model=DocumentRestoreResponse)
async def restore_document_version(
    document_uuid: uuid.UUID,
    version_uuid: uuid.UUID,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Восстановление документа из версии"""
    document, version, restored_from = await DocumentVersionService(db).restore_version(
        document_uuid, version_uuid, identity
    )

    return DocumentRestoreResponse(
        document=DocumentResponse.from_entity(document),
        restored_from=restored_from.version_number,
        version=DocumentVersionResponse.from_entity(version)
    )


@router.get("/{document_uuid}/compare", response_model=DocumentCompareResponse)
async def compare_document_versions(
    document_uuid: uuid.UUID,
    v1: Optional[uuid.UUID] = None,
    v2: Optional[uuid.UUID] = None,
    mode: str = Query("words", pattern="^(words|lines)$"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db)
):
    """Сравнение версий документа"""
    result = await DocumentVersionService(db).compare_versions(
        document_uuid, identity, from_version=v1, to_version=v2, mode=mode
    )
    return DocumentCompareResponse(**result)
