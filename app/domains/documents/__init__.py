from app.domains.documents.entities import Document, DocumentVersion, DocumentStatus, ChangeType
from app.domains.documents.changes import ChangeSummary, classify
from app.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentListResponse,
    DocumentVersionResponse, DocumentVersionListResponse, DocumentRestoreResponse,
    DocumentCompareResponse
)
from app.domains.documents.services import DocumentService, DocumentVersionService

__all__ = [
    "Document", "DocumentVersion", "DocumentStatus", "ChangeType",
    "ChangeSummary", "classify",
    "DocumentCreate", "DocumentUpdate", "DocumentResponse", "DocumentListResponse",
    "DocumentVersionResponse", "DocumentVersionListResponse", "DocumentRestoreResponse",
    "DocumentCompareResponse",
    "DocumentService", "DocumentVersionService"
]
