import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class SharePermission(str, Enum):
    """Уровень доступа по ссылке"""
    VIEW = "VIEW"
    COMMENT = "COMMENT"
    EDIT = "EDIT"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Время в БД хранится без часового пояса, в UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Share:
    """Ссылка доступа к документу для пользователей вне организации"""

    def __init__(
        self,
        uuid: uuid.UUID,
        document_id: uuid.UUID,
        access_token: str,
        shared_by_user_id: str,
        permission: SharePermission = SharePermission.VIEW,
        shared_with_email: Optional[str] = None,
        password_hash: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        view_count: int = 0,
        last_viewed_at: Optional[datetime] = None,
        message: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.document_id = document_id
        self.access_token = access_token
        self.shared_by_user_id = shared_by_user_id
        self.permission = SharePermission(permission)
        self.shared_with_email = shared_with_email
        self.password_hash = password_hash
        self.expires_at = to_naive_utc(expires_at)
        self.view_count = view_count
        self.last_viewed_at = last_viewed_at
        self.message = message
        self.created_at = created_at or datetime.utcnow()

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Просроченная ссылка не удаляется, а отклоняется при каждой проверке"""
        if self.expires_at is None:
            return False
        return self.expires_at < (to_naive_utc(now) or datetime.utcnow())

    def can_edit(self) -> bool:
        return self.permission == SharePermission.EDIT

    def __eq__(self, other) -> bool:
        if not isinstance(other, Share):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Share(uuid={self.uuid}, document_id={self.document_id}, permission={self.permission.value})"
