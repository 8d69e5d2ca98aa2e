from fastapi import APIRouter, Depends, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.core.auth import get_tenant_identity
from app.core.db import get_db
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import Identity
from app.domains.sharing.schemas import (
    ShareCreate, ShareUpdate, ShareResponse, SharedDocumentResponse,
    SharedDocumentEdit, SharedDocumentEditResponse
)
from app.domains.sharing.services import ShareRegistry, build_share_url

router = APIRouter(prefix="/documents/{document_uuid}/shares", tags=["shares"])
public_router = APIRouter(prefix="/share", tags=["shared documents"])


def _to_response(share) -> ShareResponse:
    return ShareResponse.from_entity(share, build_share_url(share.access_token))


@router.get("", response_model=List[ShareResponse])
async def list_shares(
    document_uuid: uuid.UUID,
    identity: Identity = Depends(get_tenant_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение ссылок доступа к документу"""
    await DocumentService(db).get_document(document_uuid, identity)
    shares = await ShareRegistry(db).list_shares(document_uuid)
    return [_to_response(share) for share in shares]


@router.post("", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
async def create_share(
    document_uuid: uuid.UUID,
    share_data: ShareCreate,
    identity: Identity = Depends(get_tenant_identity),
    db: AsyncSession = Depends(get_db)
):
    """Создание ссылки доступа"""
    await DocumentService(db).get_document(document_uuid, identity)
    share = await ShareRegistry(db).create_share(document_uuid, share_data, identity.user_id)
    return _to_response(share)


@router.get("/{share_uuid}", response_model=ShareResponse)
async def get_share(
    document_uuid: uuid.UUID,
    share_uuid: uuid.UUID,
    identity: Identity = Depends(get_tenant_identity),
    db: AsyncSession = Depends(get_db)
):
    """Получение ссылки доступа"""
    await DocumentService(db).get_document(document_uuid, identity)
    share = await ShareRegistry(db).get_share(document_uuid, share_uuid)
    return _to_response(share)


@router.patch("/{share_uuid}", response_model=ShareResponse)
async def update_share(
    document_uuid: uuid.UUID,
    share_uuid: uuid.UUID,
    share_data: ShareUpdate,
    identity: Identity = Depends(get_tenant_identity),
    db: AsyncSession = Depends(get_db)
):
    """Изменение прав, срока действия или пароля ссылки"""
    await DocumentService(db).get_document(document_uuid, identity)
    share = await ShareRegistry(db).update_share(document_uuid, share_uuid, share_data)
    return _to_response(share)


@router.delete("/{share_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_share(
    document_uuid: uuid.UUID,
    share_uuid: uuid.UUID,
    identity: Identity = Depends(get_tenant_identity),
    db: AsyncSession = Depends(get_db)
):
    """Отзыв ссылки доступа"""
    await DocumentService(db).get_document(document_uuid, identity)
    await ShareRegistry(db).revoke_share(document_uuid, share_uuid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get("/{access_token}", response_model=SharedDocumentResponse)
async def open_shared_document(
    access_token: str,
    password: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Открытие документа по ссылке без аутентификации"""
    return await ShareRegistry(db).resolve_share(access_token, password)


@public_router.patch("/{access_token}", response_model=SharedDocumentEditResponse)
async def edit_shared_document(
    access_token: str,
    edit_data: SharedDocumentEdit,
    password: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Изменение документа по ссылке с правом EDIT"""
    document = await ShareRegistry(db).edit_shared_document(access_token, edit_data.content, password)
    return SharedDocumentEditResponse(updated_at=document.updated_at)
