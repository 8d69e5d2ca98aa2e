import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.http import health_router, documents_router, shares_router, shared_documents_router
from app.core.config import settings
from app.core.errors import DocumentServiceError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="LexDocs",
    description="API юридических документов: история версий и ссылки доступа",
    version="1.0.0"
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocumentServiceError)
async def document_service_error_handler(request: Request, exc: DocumentServiceError):
    """Ошибки домена отдаются структурированным JSON без внутренних деталей"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "internal_error"}
    )


# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(shares_router)
app.include_router(shared_documents_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "LexDocs API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
