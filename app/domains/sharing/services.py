import logging
from datetime import datetime
from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.config import settings
from app.core.errors import ForbiddenError, NotFoundError, PasswordRequiredError, ShareExpiredError
from app.core.security import generate_share_token, get_password_hash, verify_password
from app.db.repositories.document_repository import DocumentRepository
from app.db.repositories.share_repository import DocumentShareRepository
from app.domains.documents.entities import Document
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import Identity
from app.domains.sharing.entities import Share
from app.domains.sharing.schemas import ShareCreate, ShareUpdate

logger = logging.getLogger(__name__)


def build_share_url(access_token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/share/{access_token}"


class ShareRegistry:
    """Реестр ссылок доступа к документам.

    Владение документом проверяет вызывающий код (DocumentService) до
    create_share, update_share и revoke_share.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.share_repository = DocumentShareRepository(session)
        self.document_repository = DocumentRepository(session)

    async def create_share(
        self,
        document_uuid: uuid.UUID,
        share_data: ShareCreate,
        shared_by: str
    ) -> Share:
        """Выпуск новой ссылки с непредсказуемым токеном"""
        share = Share(
            uuid=uuid.uuid4(),
            document_id=document_uuid,
            access_token=generate_share_token(),
            shared_by_user_id=shared_by,
            permission=share_data.permission,
            shared_with_email=share_data.shared_with_email,
            password_hash=get_password_hash(share_data.password) if share_data.password else None,
            expires_at=share_data.expires_at,
            message=share_data.message
        )

        try:
            created = await self.share_repository.create(share)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Share {created.uuid} ({created.permission.value}) created for document {document_uuid}")
        return created

    async def list_shares(self, document_uuid: uuid.UUID) -> List[Share]:
        return await self.share_repository.get_by_document(document_uuid)

    async def get_share(self, document_uuid: uuid.UUID, share_uuid: uuid.UUID) -> Share:
        share = await self.share_repository.get_by_uuid(document_uuid, share_uuid)

        if not share:
            raise NotFoundError("Share not found")

        return share

    async def update_share(
        self,
        document_uuid: uuid.UUID,
        share_uuid: uuid.UUID,
        share_data: ShareUpdate
    ) -> Share:
        """Частичное обновление: непереданные поля сохраняют прежние значения"""
        await self.get_share(document_uuid, share_uuid)

        provided = share_data.model_dump(exclude_unset=True)
        values: Dict[str, Any] = {}

        if "permission" in provided:
            values["permission"] = provided["permission"].value
        if "expires_at" in provided:
            values["expires_at"] = provided["expires_at"]
        if "password" in provided:
            password = provided["password"]
            values["password_hash"] = get_password_hash(password) if password else None

        try:
            await self.share_repository.update_fields(share_uuid, values)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Share {share_uuid} updated: {sorted(provided)}")
        return await self.get_share(document_uuid, share_uuid)

    async def revoke_share(self, document_uuid: uuid.UUID, share_uuid: uuid.UUID) -> None:
        """Отзыв ссылки; токен больше никогда не будет найден"""
        await self.get_share(document_uuid, share_uuid)

        try:
            await self.share_repository.delete(share_uuid)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Share {share_uuid} revoked")

    async def authorize(self, access_token: str, password: Optional[str] = None) -> Share:
        """Проверки по порядку: токен, срок действия, пароль"""
        share = await self.share_repository.get_by_token(access_token)

        if not share:
            raise NotFoundError("Share not found")

        if share.is_expired():
            logger.info(f"Rejected access to expired share {share.uuid}")
            raise ShareExpiredError()

        if share.has_password and (not password or not verify_password(password, share.password_hash)):
            raise PasswordRequiredError()

        return share

    async def resolve_share(self, access_token: str, password: Optional[str] = None) -> Dict[str, Any]:
        """Открытие документа по ссылке с учётом просмотра"""
        share = await self.authorize(access_token, password)
        document = await self.document_repository.get_by_uuid(share.document_id)

        if not document:
            raise NotFoundError("Share not found")

        try:
            viewed = await self.share_repository.register_view(share.uuid, datetime.utcnow())
            if viewed is None:
                # Ссылку отозвали или сократили срок между проверкой и просмотром
                if await self.share_repository.get_by_token(access_token) is None:
                    raise NotFoundError("Share not found")
                logger.info(f"Rejected access to expired share {share.uuid}")
                raise ShareExpiredError()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        view_count, last_viewed_at = viewed
        share.view_count = view_count
        share.last_viewed_at = last_viewed_at

        return {
            "document": {
                "uuid": document.uuid,
                "title": document.title,
                "content": document.content,
                "status": document.status,
                "created_at": document.created_at,
                "updated_at": document.updated_at
            },
            "permission": share.permission,
            "message": share.message,
            "shared_at": share.created_at,
            "share_id": share.uuid,
            "view_count": share.view_count
        }

    async def edit_shared_document(
        self,
        access_token: str,
        content: str,
        password: Optional[str] = None
    ) -> Document:
        """Изменение содержимого по ссылке; разрешено только для EDIT"""
        share = await self.authorize(access_token, password)

        if not share.can_edit():
            raise ForbiddenError("You do not have permission to edit this document")

        actor = Identity(user_id=f"share:{share.uuid}", name="External editor", avatar="EX")
        document = await DocumentService(self.session).apply_external_edit(
            share.document_id, {"content": content}, actor
        )

        logger.info(f"Document {share.document_id} edited through share {share.uuid}")
        return document
