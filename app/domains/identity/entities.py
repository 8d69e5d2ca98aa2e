from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Identity:
    """Пользователь и организация, переданные провайдером аутентификации"""

    user_id: str
    tenant_id: Optional[str] = None
    name: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or "User"

    @property
    def initials(self) -> str:
        """Инициалы для аватара, как в журнале версий"""
        if self.avatar:
            return self.avatar
        parts = [p for p in (self.name or "").split() if p]
        if not parts:
            return "U"
        return "".join(p[0].upper() for p in parts[:2])

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> Optional["Identity"]:
        user_id = claims.get("sub")
        if not user_id:
            return None
        return cls(
            user_id=str(user_id),
            tenant_id=claims.get("org_id") or None,
            name=claims.get("name"),
            avatar=claims.get("avatar"),
        )

    def to_claims(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {"sub": self.user_id}
        if self.tenant_id:
            claims["org_id"] = self.tenant_id
        if self.name:
            claims["name"] = self.name
        if self.avatar:
            claims["avatar"] = self.avatar
        return claims

    def __repr__(self) -> str:
        return f"Identity(user_id={self.user_id}, tenant_id={self.tenant_id})"
