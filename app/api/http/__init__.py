from app.api.http.health import router as health_router
from app.api.http.auth import router as auth_router
from app.api.http.profiles import router as profiles_router
from app.api.http.documents import router as documents_router
from app.api.http.shared import router as shared_router
from app.api.http.comments import router as comments_router
from app.api.http.files import router as files_router

__all__ = [
    "health_router",
    "auth_router",
    "profiles_router",
    "documents_router",
    "shared_router",
    "comments_router",
    "files_router"
]
