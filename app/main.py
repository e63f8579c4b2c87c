from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.http import (
    health_router, auth_router, profiles_router, documents_router,
    shared_router, comments_router, files_router
)
from app.api.ws import websocket_router
from app.core.config import settings
from app.core.db import create_all
from app.core.exceptions import (
    AuthenticationFailed, Conflict, DocumentPersistenceError, NotFoundOrForbidden,
    PayloadTooLarge, PDFShareError, StorageUnavailable, ValidationFailed
)
from app.core.logging import setup_logging

logger = logging.getLogger(__name__)

# Порядок важен: подклассы раньше базовых классов
EXCEPTION_STATUS = [
    (PayloadTooLarge, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (AuthenticationFailed, status.HTTP_401_UNAUTHORIZED),
    (NotFoundOrForbidden, status.HTTP_404_NOT_FOUND),
    (Conflict, status.HTTP_409_CONFLICT),
    (StorageUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DocumentPersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.database_url.startswith("sqlite"):
        # Для PostgreSQL схема создается миграциями alembic
        await create_all()
    logger.info("PDFShare started")
    yield
    logger.info("PDFShare stopped")


app = FastAPI(
    title="PDFShare",
    description="Загрузка PDF, доступ по ссылке и комментарии в реальном времени",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PDFShareError)
async def pdfshare_error_handler(request: Request, exc: PDFShareError):
    """Перевод доменных исключений в HTTP-ответы"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_class, code in EXCEPTION_STATUS:
        if isinstance(exc, exc_class):
            status_code = code
            break

    headers = None
    if isinstance(exc, AuthenticationFailed):
        headers = {"WWW-Authenticate": "Bearer"}
    if status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")

    return JSONResponse(status_code=status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(documents_router)
app.include_router(shared_router)
app.include_router(comments_router)
app.include_router(files_router)
app.include_router(websocket_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "PDFShare API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
