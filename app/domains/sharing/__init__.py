from app.domains.sharing.entities import Share, SharePermission
from app.domains.sharing.schemas import (
    ShareCreate, ShareUpdate, ShareResponse, SharedDocumentResponse,
    SharedDocumentEdit, SharedDocumentEditResponse
)
from app.domains.sharing.services import ShareRegistry, build_share_url

__all__ = [
    "Share", "SharePermission",
    "ShareCreate", "ShareUpdate", "ShareResponse", "SharedDocumentResponse",
    "SharedDocumentEdit", "SharedDocumentEditResponse",
    "ShareRegistry", "build_share_url"
]
