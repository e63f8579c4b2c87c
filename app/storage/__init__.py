from functools import lru_cache

from app.core.config import settings
from app.storage.base import ObjectExists, ObjectNotFound, InvalidKey, StorageBackend, StoredObject
from app.storage.local import LocalStorageBackend
from app.storage.memory import MemoryStorageBackend


@lru_cache
def get_storage() -> StorageBackend:
    """Хранилище, настроенное через STORAGE_BACKEND (зависимость FastAPI)"""
    if settings.storage_backend == "memory":
        return MemoryStorageBackend(settings.storage_bucket)
    return LocalStorageBackend(settings.storage_root, settings.storage_bucket)


__all__ = [
    "ObjectExists", "ObjectNotFound", "InvalidKey", "StorageBackend", "StoredObject",
    "LocalStorageBackend", "MemoryStorageBackend", "get_storage"
]
