from app.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository
from app.db.repositories.share_repository import DocumentShareRepository

__all__ = [
    "DocumentRepository",
    "DocumentVersionRepository",
    "DocumentShareRepository"
]
