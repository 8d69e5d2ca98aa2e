import logging
from typing import Optional, List, Dict, Any, Callable, Mapping, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.errors import (
    ConcurrentWriteConflictError, ForbiddenError, NotFoundError, ValidationFailedError
)
from app.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository
from app.domains.documents.changes import ChangeSummary, classify, diff_fields
from app.domains.documents.comparison import compare_texts, strip_html
from app.domains.documents.entities import Document, DocumentVersion, ChangeType
from app.domains.documents.schemas import DocumentCreate, DocumentUpdate
from app.domains.identity.entities import Identity

logger = logging.getLogger(__name__)

# Одна повторная попытка при гонке номеров версий
MAX_WRITE_ATTEMPTS = 2

Summarizer = Callable[[Mapping[str, Any], Mapping[str, Any]], ChangeSummary]


class DocumentService:
    """Сервис для работы с документами.

    Единственная точка изменения документов: каждое сохранение добавляет
    версию в журнал в той же транзакции, что и запись документа.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)

    async def create_document(self, document_data: DocumentCreate, identity: Identity) -> Document:
        """Создание нового документа с версией 1 типа CREATED"""
        document = Document.create_document(
            user_id=identity.user_id,
            organization_id=identity.tenant_id,
            title=document_data.title,
            content=document_data.content,
            status=document_data.status,
            document_type=document_data.document_type,
            jurisdiction=document_data.jurisdiction
        )
        snapshot = document.snapshot()
        change = classify(None, snapshot)

        try:
            created_document = await self.document_repository.create(document)
            await self.version_repository.append_version(
                document_id=created_document.uuid,
                snapshot=snapshot,
                change_type=change.change_type,
                change_summary=change.summary,
                changed_fields=change.changed_fields,
                actor=identity
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Document {created_document.uuid} created by {identity.user_id}")
        return created_document

    async def get_document(self, document_uuid: uuid.UUID, identity: Identity) -> Document:
        """Получение документа с проверкой доступа"""
        return await self._get_accessible(document_uuid, identity)

    async def list_documents_for_viewer(
        self,
        identity: Identity,
        scope: str = "all",
        limit: int = 100,
        offset: int = 0
    ) -> List[Document]:
        """Документы пользователя и его организации, от последних изменённых"""
        if scope not in ("all", "my", "team"):
            raise ValidationFailedError(f"Unknown filter: {scope}")
        return await self.document_repository.list_for_viewer(
            identity.user_id, identity.tenant_id, scope, limit, offset
        )

    async def update_document(
        self,
        document_uuid: uuid.UUID,
        update_data: DocumentUpdate,
        identity: Identity,
        audit_log_id: Optional[str] = None
    ) -> Document:
        """Обновление документа с записью новой версии"""
        changes = update_data.model_dump(exclude_unset=True)

        document, _ = await self._save_revision(
            document_uuid, identity, changes, classify, audit_log_id=audit_log_id
        )
        return document

    async def apply_external_edit(
        self,
        document_uuid: uuid.UUID,
        changes: Dict[str, Any],
        actor: Identity
    ) -> Document:
        """Изменение документа по ссылке с правом EDIT.

        Права проверяет реестр ссылок, поэтому проверка организации пропускается.
        """
        document, _ = await self._save_revision(
            document_uuid, actor, changes, classify, check_access=False
        )
        return document

    async def delete_document(self, document_uuid: uuid.UUID, identity: Identity) -> None:
        """Удаление документа вместе с версиями и ссылками"""
        try:
            await self._get_accessible(document_uuid, identity)
            await self.document_repository.delete(document_uuid)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Document {document_uuid} deleted by {identity.user_id}")

    async def _get_accessible(
        self,
        document_uuid: uuid.UUID,
        identity: Identity,
        for_update: bool = False
    ) -> Document:
        document = await self.document_repository.get_by_uuid(document_uuid, for_update=for_update)

        if not document:
            raise NotFoundError("Document not found")

        if not document.is_visible_to(identity.user_id, identity.tenant_id):
            raise ForbiddenError()

        return document

    async def _save_revision(
        self,
        document_uuid: uuid.UUID,
        actor: Identity,
        changes: Mapping[str, Any],
        summarize: Summarizer,
        check_access: bool = True,
        audit_log_id: Optional[str] = None
    ) -> Tuple[Document, DocumentVersion]:
        """Запись версии и нового состояния документа одной транзакцией.

        Версия добавляется раньше записи документа. При конфликте номеров
        транзакция откатывается и повторяется один раз с заново прочитанным
        состоянием.
        """
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            try:
                if check_access:
                    document = await self._get_accessible(document_uuid, actor, for_update=True)
                else:
                    document = await self.document_repository.get_by_uuid(document_uuid, for_update=True)
                    if not document:
                        raise NotFoundError("Document not found")

                previous = document.snapshot()
                change = summarize(previous, changes)

                document.apply_changes(changes)

                version = await self.version_repository.append_version(
                    document_id=document.uuid,
                    snapshot=document.snapshot(),
                    change_type=change.change_type,
                    change_summary=change.summary,
                    changed_fields=change.changed_fields,
                    actor=actor,
                    audit_log_id=audit_log_id
                )
                updated_document = await self.document_repository.update(document)
                await self.session.commit()
            except ConcurrentWriteConflictError:
                await self.session.rollback()
                if attempt >= MAX_WRITE_ATTEMPTS:
                    logger.error(f"Version conflict on document {document_uuid} persisted after retry")
                    raise
                logger.warning(f"Version conflict on document {document_uuid}, retrying")
                continue
            except Exception:
                await self.session.rollback()
                raise

            logger.info(
                f"Document {document_uuid} saved as version {version.version_number} "
                f"({version.change_type.value}) by {actor.user_id}"
            )
            return updated_document, version

        raise ConcurrentWriteConflictError()


class DocumentVersionService:
    """Сервис для работы с версиями документов"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.version_repository = DocumentVersionRepository(session)
        self.document_service = DocumentService(session)

    async def list_versions(self, document_uuid: uuid.UUID, identity: Identity) -> List[DocumentVersion]:
        """Получение версий документа, от новых к старым"""
        await self.document_service.get_document(document_uuid, identity)
        return await self.version_repository.get_by_document(document_uuid)

    async def get_version(
        self,
        document_uuid: uuid.UUID,
        version_uuid: uuid.UUID,
        identity: Identity
    ) -> DocumentVersion:
        """Получение конкретной версии документа"""
        await self.document_service.get_document(document_uuid, identity)
        version = await self.version_repository.get_by_uuid(document_uuid, version_uuid)

        if not version:
            raise NotFoundError("Version not found")

        return version

    async def restore_version(
        self,
        document_uuid: uuid.UUID,
        version_uuid: uuid.UUID,
        identity: Identity
    ) -> Tuple[Document, DocumentVersion, DocumentVersion]:
        """Восстановление документа из версии.

        История не переписывается: восстановление добавляет новую версию
        типа RESTORE.
        """
        restored_from = await self.get_version(document_uuid, version_uuid, identity)
        restored_state = {
            "title": restored_from.title,
            "content": restored_from.content,
            "status": restored_from.status
        }

        def summarize(previous: Mapping[str, Any], changes: Mapping[str, Any]) -> ChangeSummary:
            return ChangeSummary(
                ChangeType.RESTORE,
                diff_fields(previous, changes),
                f"Restored to version {restored_from.version_number}"
            )

        document, version = await self.document_service._save_revision(
            document_uuid, identity, restored_state, summarize
        )
        return document, version, restored_from

    async def compare_versions(
        self,
        document_uuid: uuid.UUID,
        identity: Identity,
        from_version: Optional[uuid.UUID] = None,
        to_version: Optional[uuid.UUID] = None,
        mode: str = "words"
    ) -> Dict[str, Any]:
        """Сравнение двух версий, версии с текущим состоянием или последней версии с текущим"""
        if mode not in ("words", "lines"):
            raise ValidationFailedError(f"Unsupported compare mode: {mode}")

        document = await self.document_service.get_document(document_uuid, identity)

        if from_version and to_version:
            old = await self.get_version(document_uuid, from_version, identity)
            new = await self.get_version(document_uuid, to_version, identity)
            old_content, new_content = old.content, new.content
            from_label, to_label = f"Version {old.version_number}", f"Version {new.version_number}"
        else:
            if from_version:
                old = await self.get_version(document_uuid, from_version, identity)
            else:
                old = await self.version_repository.get_latest_version(document_uuid)
                if not old:
                    raise ValidationFailedError("No versions to compare")
            old_content, new_content = old.content, document.content
            from_label, to_label = f"Version {old.version_number}", "Current"

        result = compare_texts(strip_html(old_content), strip_html(new_content), mode)
        result.update({
            "document_id": document.uuid,
            "from_label": from_label,
            "to_label": to_label
        })
        return result
