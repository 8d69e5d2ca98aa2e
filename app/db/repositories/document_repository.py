from typing import Optional, List, Dict, Any, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_, or_
from sqlalchemy.exc import IntegrityError
import uuid

from app.core.errors import ConcurrentWriteConflictError
from app.db.models.document import Document as DocumentModel, DocumentVersion as DocumentVersionModel
from app.db.models.share import DocumentShare as DocumentShareModel

if TYPE_CHECKING:
    from app.domains.documents.entities import Document, DocumentVersion, ChangeType
    from app.domains.identity.entities import Identity


class DocumentRepository:
    """Репозиторий для работы с документами.

    Методы только сбрасывают изменения в БД (flush); фиксацией транзакции
    управляет сервис.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=document.uuid,
            title=document.title,
            content=document.content,
            status=document.status.value,
            document_type=document.document_type,
            jurisdiction=document.jurisdiction,
            user_id=document.user_id,
            organization_id=document.organization_id,
            created_at=document.created_at,
            updated_at=document.updated_at
        )

        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def get_by_uuid(self, document_uuid: uuid.UUID, for_update: bool = False) -> Optional["Document"]:
        """Получение документа по UUID; for_update блокирует строку до конца транзакции"""
        stmt = select(DocumentModel).where(DocumentModel.uuid == document_uuid)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def list_for_viewer(
        self,
        user_id: str,
        tenant_id: Optional[str] = None,
        scope: str = "all",
        limit: int = 100,
        offset: int = 0
    ) -> List["Document"]:
        """Документы, видимые пользователю, от последних изменённых"""
        if scope == "my":
            condition = DocumentModel.user_id == user_id
        elif scope == "team":
            if not tenant_id:
                return []
            condition = and_(DocumentModel.organization_id == tenant_id, DocumentModel.user_id != user_id)
        elif tenant_id:
            condition = or_(DocumentModel.user_id == user_id, DocumentModel.organization_id == tenant_id)
        else:
            condition = DocumentModel.user_id == user_id

        result = await self.session.execute(
            select(DocumentModel)
            .where(condition)
            .order_by(DocumentModel.updated_at.desc())
            .offset(offset)
            .limit(limit)
        )
        db_documents = result.scalars().all()
        return [self._to_domain(doc) for doc in db_documents]

    async def update(self, document: "Document") -> "Document":
        """Запись текущего состояния документа"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(
                title=document.title,
                content=document.content,
                status=document.status.value,
                document_type=document.document_type,
                jurisdiction=document.jurisdiction,
                updated_at=document.updated_at
            )
        )

        await self.session.execute(stmt)
        await self.session.flush()
        return document

    async def delete(self, document_uuid: uuid.UUID) -> bool:
        """Удаление документа вместе с версиями и ссылками доступа"""
        await self.session.execute(
            delete(DocumentShareModel).where(DocumentShareModel.document_id == document_uuid)
        )
        await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.document_id == document_uuid)
        )
        result = await self.session.execute(
            delete(DocumentModel).where(DocumentModel.uuid == document_uuid)
        )
        return result.rowcount > 0

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.documents.entities import Document

        return Document(
            uuid=db_document.uuid,
            title=db_document.title,
            content=db_document.content,
            status=db_document.status,
            document_type=db_document.document_type,
            jurisdiction=db_document.jurisdiction,
            user_id=db_document.user_id,
            organization_id=db_document.organization_id,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class DocumentVersionRepository:
    """Журнал версий документа: только добавление, без изменения и удаления"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_max_version_number(self, document_id: uuid.UUID) -> int:
        """Текущий максимальный номер версии (0, если версий нет)"""
        result = await self.session.execute(
            select(func.coalesce(func.max(DocumentVersionModel.version_number), 0))
            .where(DocumentVersionModel.document_id == document_id)
        )
        return result.scalar_one()

    async def append_version(
        self,
        document_id: uuid.UUID,
        snapshot: Dict[str, Any],
        change_type: "ChangeType",
        change_summary: str,
        changed_fields: List[str],
        actor: "Identity",
        audit_log_id: Optional[str] = None
    ) -> "DocumentVersion":
        """Добавление версии с номером max + 1.

        Уникальный индекс (document_id, version_number) превращает гонку двух
        записей в ConcurrentWriteConflictError; после неё транзакцию нужно
        откатить.
        """
        version_number = await self.get_max_version_number(document_id) + 1

        status = snapshot["status"]
        db_version = DocumentVersionModel(
            uuid=uuid.uuid4(),
            document_id=document_id,
            version_number=version_number,
            title=snapshot["title"],
            content=snapshot["content"],
            status=getattr(status, "value", status),
            change_type=change_type.value,
            change_summary=change_summary,
            changed_fields=list(changed_fields),
            user_id=actor.user_id,
            user_name=actor.display_name,
            user_avatar=actor.initials,
            audit_log_id=audit_log_id
        )

        self.session.add(db_version)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ConcurrentWriteConflictError() from exc
        return self._to_domain(db_version)

    async def get_by_uuid(self, document_id: uuid.UUID, version_uuid: uuid.UUID) -> Optional["DocumentVersion"]:
        """Получение версии документа по UUID"""
        result = await self.session.execute(
            select(DocumentVersionModel).where(
                and_(
                    DocumentVersionModel.uuid == version_uuid,
                    DocumentVersionModel.document_id == document_id
                )
            )
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def get_by_document(
        self,
        document_id: uuid.UUID,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List["DocumentVersion"]:
        """Получение версий документа, от новых к старым"""
        stmt = (
            select(DocumentVersionModel)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.version_number.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        db_versions = result.scalars().all()
        return [self._to_domain(version) for version in db_versions]

    async def get_latest_version(self, document_id: uuid.UUID) -> Optional["DocumentVersion"]:
        """Получение последней версии документа"""
        result = await self.session.execute(
            select(DocumentVersionModel)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.version_number.desc())
            .limit(1)
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def count_by_document(self, document_id: uuid.UUID) -> int:
        """Подсчет количества версий документа"""
        result = await self.session.execute(
            select(func.count(DocumentVersionModel.uuid))
            .where(DocumentVersionModel.document_id == document_id)
        )
        return result.scalar_one()

    def _to_domain(self, db_version: DocumentVersionModel) -> "DocumentVersion":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.documents.entities import DocumentVersion

        return DocumentVersion(
            uuid=db_version.uuid,
            document_id=db_version.document_id,
            version_number=db_version.version_number,
            title=db_version.title,
            content=db_version.content,
            status=db_version.status,
            change_type=db_version.change_type,
            change_summary=db_version.change_summary,
            changed_fields=db_version.changed_fields or [],
            user_id=db_version.user_id,
            user_name=db_version.user_name,
            user_avatar=db_version.user_avatar,
            audit_log_id=db_version.audit_log_id,
            created_at=db_version.created_at
        )
