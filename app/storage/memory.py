from datetime import datetime
from typing import Dict, List, Tuple

from app.storage.base import ObjectExists, ObjectNotFound, StorageBackend, StoredObject, validate_key


class MemoryStorageBackend(StorageBackend):
    """Хранилище в памяти процесса (тесты и локальные демо)"""

    def __init__(self, bucket: str):
        super().__init__(bucket)
        self._objects: Dict[str, Tuple[bytes, StoredObject]] = {}

    async def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        validate_key(key)
        if key in self._objects:
            raise ObjectExists(f"Object {key} already exists")

        stored = StoredObject(
            key=key,
            size=len(data),
            content_type=content_type,
            modified_at=datetime.utcnow()
        )
        self._objects[key] = (bytes(data), stored)
        return stored

    async def get(self, key: str) -> bytes:
        validate_key(key)
        if key not in self._objects:
            raise ObjectNotFound(f"Object {key} not found")
        return self._objects[key][0]

    async def delete(self, key: str) -> bool:
        validate_key(key)
        return self._objects.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        validate_key(key)
        return key in self._objects

    async def list_objects(self) -> List[StoredObject]:
        return [stored for _, stored in self._objects.values()]
