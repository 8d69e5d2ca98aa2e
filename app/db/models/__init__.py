from app.db.models.document import Document, DocumentVersion
from app.db.models.share import DocumentShare

__all__ = [
    "Document", 
    "DocumentVersion",
    "DocumentShare"
]
