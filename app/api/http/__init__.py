from app.api.http.health import router as health_router
from app.api.http.documents import router as documents_router
from app.api.http.shares import router as shares_router, public_router as shared_documents_router

__all__ = [
    "health_router",
    "documents_router",
    "shares_router",
    "shared_documents_router"
]
