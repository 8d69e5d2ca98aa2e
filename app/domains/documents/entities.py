import uuid
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any


class DocumentStatus(str, Enum):
    """Жизненный цикл документа"""
    DRAFT = "DRAFT"
    FINAL = "FINAL"
    ARCHIVED = "ARCHIVED"


class ChangeType(str, Enum):
    """Классификация изменения, породившего версию"""
    CREATED = "CREATED"
    CONTENT = "CONTENT"
    STATUS = "STATUS"
    METADATA = "METADATA"
    MIXED = "MIXED"
    RESTORE = "RESTORE"


# Поля, участвующие в сравнении состояний, в фиксированном порядке
TRACKED_FIELDS = ("title", "content", "status", "document_type", "jurisdiction")

DEFAULT_TITLE = "Untitled Document"
DEFAULT_DOCUMENT_TYPE = "Other"
DEFAULT_JURISDICTION = "General"


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        uuid: uuid.UUID,
        title: str,
        user_id: str,
        organization_id: str,
        content: str = "",
        status: DocumentStatus = DocumentStatus.DRAFT,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        jurisdiction: Optional[str] = DEFAULT_JURISDICTION,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.title = title
        self.content = content
        self.status = DocumentStatus(status)
        self.document_type = document_type
        self.jurisdiction = jurisdiction
        self.user_id = user_id
        self.organization_id = organization_id
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def snapshot(self) -> Dict[str, Any]:
        """Текущее значение отслеживаемых полей"""
        return {field: getattr(self, field) for field in TRACKED_FIELDS}

    def apply_changes(self, changes: Dict[str, Any]) -> None:
        """Применение изменений к отслеживаемым полям"""
        for field, value in changes.items():
            if field not in TRACKED_FIELDS:
                raise ValueError(f"Unknown document field: {field}")
            if field == "status":
                value = DocumentStatus(value)
            setattr(self, field, value)
        self.updated_at = datetime.utcnow()

    def is_visible_to(self, user_id: str, tenant_id: Optional[str]) -> bool:
        """Документ доступен владельцу и членам его организации"""
        if self.user_id == user_id:
            return True
        return tenant_id is not None and self.organization_id == tenant_id

    def get_content_length(self) -> int:
        """Получение длины содержимого документа"""
        return len(self.content)

    def get_word_count(self) -> int:
        """Подсчет количества слов в документе"""
        if not self.content.strip():
            return 0
        return len(self.content.split())

    @classmethod
    def create_document(
        cls,
        user_id: str,
        organization_id: Optional[str] = None,
        title: Optional[str] = None,
        content: Optional[str] = None,
        status: Optional[DocumentStatus] = None,
        document_type: Optional[str] = None,
        jurisdiction: Optional[str] = None
    ) -> "Document":
        """Создание нового документа"""
        return cls(
            uuid=uuid.uuid4(),
            title=title or DEFAULT_TITLE,
            content=content or "",
            status=status or DocumentStatus.DRAFT,
            document_type=document_type or DEFAULT_DOCUMENT_TYPE,
            jurisdiction=jurisdiction or DEFAULT_JURISDICTION,
            user_id=user_id,
            # Личные документы без организации привязываются к самому пользователю
            organization_id=organization_id or user_id
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, title={self.title}, status={self.status.value})"


class DocumentVersion:
    """Неизменяемый снимок документа"""

    def __init__(
        self,
        uuid: uuid.UUID,
        document_id: uuid.UUID,
        version_number: int,
        title: str,
        content: str,
        status: DocumentStatus,
        change_type: ChangeType,
        change_summary: str,
        changed_fields: List[str],
        user_id: str,
        user_name: Optional[str] = None,
        user_avatar: Optional[str] = None,
        audit_log_id: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.document_id = document_id
        self.version_number = version_number
        self.title = title
        self.content = content
        self.status = DocumentStatus(status)
        self.change_type = ChangeType(change_type)
        self.change_summary = change_summary
        self.changed_fields = list(changed_fields)
        self.user_id = user_id
        self.user_name = user_name
        self.user_avatar = user_avatar
        self.audit_log_id = audit_log_id
        self.created_at = created_at or datetime.utcnow()

    def get_content_length(self) -> int:
        return len(self.content)

    def get_word_count(self) -> int:
        if not self.content.strip():
            return 0
        return len(self.content.split())

    def __eq__(self, other) -> bool:
        if not isinstance(other, DocumentVersion):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"DocumentVersion(uuid={self.uuid}, document_id={self.document_id}, version={self.version_number})"
