from datetime import datetime
from pathlib import Path
from typing import List
import asyncio
import logging
import mimetypes

from app.core.exceptions import StorageUnavailable
from app.storage.base import ObjectExists, ObjectNotFound, StorageBackend, StoredObject, validate_key

logger = logging.getLogger(__name__)


class LocalStorageBackend(StorageBackend):
    """Хранилище на локальном диске: <root>/<bucket>/<key>"""

    def __init__(self, root: str, bucket: str):
        super().__init__(bucket)
        self.base_path = Path(root) / bucket

    def _path(self, key: str) -> Path:
        return self.base_path / validate_key(key)

    async def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        path = self._path(key)

        def _write() -> StoredObject:
            self.base_path.mkdir(parents=True, exist_ok=True)
            # Режим "xb" не перезаписывает существующий объект
            with open(path, "xb") as fh:
                fh.write(data)
            return StoredObject(
                key=key,
                size=len(data),
                content_type=content_type,
                modified_at=datetime.utcfromtimestamp(path.stat().st_mtime)
            )

        try:
            return await asyncio.to_thread(_write)
        except FileExistsError:
            raise ObjectExists(f"Object {key} already exists")
        except OSError as e:
            logger.error(f"Failed to write object {key}: {e}")
            raise StorageUnavailable()

    async def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise ObjectNotFound(f"Object {key} not found")
        except OSError as e:
            logger.error(f"Failed to read object {key}: {e}")
            raise StorageUnavailable()

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete object {key}: {e}")
            raise StorageUnavailable()

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._path(key).is_file)

    async def list_objects(self) -> List[StoredObject]:
        def _scan() -> List[StoredObject]:
            if not self.base_path.is_dir():
                return []
            objects = []
            for path in self.base_path.iterdir():
                if not path.is_file():
                    continue
                stat = path.stat()
                objects.append(StoredObject(
                    key=path.name,
                    size=stat.st_size,
                    content_type=mimetypes.guess_type(path.name)[0] or "application/octet-stream",
                    modified_at=datetime.utcfromtimestamp(stat.st_mtime)
                ))
            return objects

        return await asyncio.to_thread(_scan)
