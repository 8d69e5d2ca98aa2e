from typing import Optional, List, Dict, Any, Tuple, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_
from sqlalchemy.exc import IntegrityError
from datetime import datetime
import uuid

from app.db.models.share import DocumentShare as DocumentShareModel

if TYPE_CHECKING:
    from app.domains.sharing.entities import Share


class DocumentShareRepository:
    """Репозиторий ссылок доступа к документам"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, share: "Share") -> "Share":
        """Создание ссылки; токен уникален на уровне БД"""
        db_share = DocumentShareModel(
            uuid=share.uuid,
            document_id=share.document_id,
            access_token=share.access_token,
            permission=share.permission.value,
            shared_by_user_id=share.shared_by_user_id,
            shared_with_email=share.shared_with_email,
            password_hash=share.password_hash,
            expires_at=share.expires_at,
            view_count=share.view_count,
            message=share.message,
            created_at=share.created_at
        )

        self.session.add(db_share)
        try:
            await self.session.flush()
        except IntegrityError:
            raise ValueError("Share token already exists")
        return self._to_domain(db_share)

    async def get_by_token(self, access_token: str) -> Optional["Share"]:
        """Поиск ссылки по токену доступа"""
        result = await self.session.execute(
            select(DocumentShareModel)
            .where(DocumentShareModel.access_token == access_token)
            .execution_options(populate_existing=True)
        )
        db_share = result.scalar_one_or_none()
        return self._to_domain(db_share) if db_share else None

    async def get_by_uuid(self, document_id: uuid.UUID, share_uuid: uuid.UUID) -> Optional["Share"]:
        """Получение ссылки документа по UUID"""
        result = await self.session.execute(
            select(DocumentShareModel)
            .where(
                and_(
                    DocumentShareModel.uuid == share_uuid,
                    DocumentShareModel.document_id == document_id
                )
            )
            .execution_options(populate_existing=True)
        )
        db_share = result.scalar_one_or_none()
        return self._to_domain(db_share) if db_share else None

    async def get_by_document(self, document_id: uuid.UUID) -> List["Share"]:
        """Ссылки документа, от новых к старым"""
        result = await self.session.execute(
            select(DocumentShareModel)
            .where(DocumentShareModel.document_id == document_id)
            .order_by(DocumentShareModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(share) for share in result.scalars().all()]

    async def update_fields(self, share_uuid: uuid.UUID, values: Dict[str, Any]) -> bool:
        """Частичное обновление: меняются только переданные поля"""
        if not values:
            return True
        result = await self.session.execute(
            update(DocumentShareModel)
            .where(DocumentShareModel.uuid == share_uuid)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def register_view(self, share_uuid: uuid.UUID, viewed_at: datetime) -> Optional[Tuple[int, datetime]]:
        """Атомарное увеличение счётчика просмотров одним условным UPDATE.

        Возвращает None, если ссылка удалена или срок её действия истёк.
        """
        result = await self.session.execute(
            update(DocumentShareModel)
            .where(
                and_(
                    DocumentShareModel.uuid == share_uuid,
                    or_(
                        DocumentShareModel.expires_at.is_(None),
                        DocumentShareModel.expires_at >= viewed_at
                    )
                )
            )
            .values(
                view_count=DocumentShareModel.view_count + 1,
                last_viewed_at=viewed_at
            )
            .returning(DocumentShareModel.view_count, DocumentShareModel.last_viewed_at)
            .execution_options(synchronize_session=False)
        )
        row = result.one_or_none()
        if row is None:
            return None
        view_count, last_viewed_at = row
        return view_count, last_viewed_at

    async def delete(self, share_uuid: uuid.UUID) -> bool:
        """Удаление ссылки без возможности восстановления"""
        result = await self.session.execute(
            delete(DocumentShareModel)
            .where(DocumentShareModel.uuid == share_uuid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def _to_domain(self, db_share: DocumentShareModel) -> "Share":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.sharing.entities import Share

        return Share(
            uuid=db_share.uuid,
            document_id=db_share.document_id,
            access_token=db_share.access_token,
            shared_by_user_id=db_share.shared_by_user_id,
            permission=db_share.permission,
            shared_with_email=db_share.shared_with_email,
            password_hash=db_share.password_hash,
            expires_at=db_share.expires_at,
            view_count=db_share.view_count,
            last_viewed_at=db_share.last_viewed_at,
            message=db_share.message,
            created_at=db_share.created_at
        )
