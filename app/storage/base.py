from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List
import re

from app.core.exceptions import Conflict, NotFoundOrForbidden, ValidationFailed

# Ключи плоские: без каталогов и относительных путей
_KEY_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class ObjectNotFound(NotFoundOrForbidden):
    """Объект отсутствует в корзине"""

    detail = "Object not found"


class InvalidKey(ValidationFailed):
    detail = "Invalid storage key"


class ObjectExists(Conflict):
    """Объект с таким ключом уже сохранен"""

    detail = "Object already exists"


@dataclass
class StoredObject:
    key: str
    size: int
    content_type: str
    modified_at: datetime


def validate_key(key: str) -> str:
    if not key or not _KEY_RE.match(key) or key in (".", ".."):
        raise InvalidKey(f"Invalid storage key: {key!r}")
    return key


class StorageBackend(ABC):
    """Объектное хранилище, ограниченное одной корзиной"""

    def __init__(self, bucket: str):
        self.bucket = bucket

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """Сохранение объекта; существующий ключ не перезаписывается"""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Чтение объекта"""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Удаление объекта; False, если объекта не было"""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Проверка существования объекта"""

    @abstractmethod
    async def list_objects(self) -> List[StoredObject]:
        """Список всех объектов корзины"""
