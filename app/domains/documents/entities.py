import os
import re
import time
import uuid
from datetime import datetime
from typing import Optional

PDF_CONTENT_TYPE = "application/pdf"

# Предел длины имени файла в большинстве файловых систем
MAX_STORAGE_KEY_LENGTH = 255

# Все символы вне [A-Za-z0-9.-] заменяются на "_"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_filename(filename: str) -> str:
    """Очистка имени файла для ключа хранилища"""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def build_storage_key(filename: str, timestamp_ms: Optional[int] = None) -> str:
    """Ключ объекта: <миллисекунды>-<очищенное имя>.

    Слишком длинное имя укорачивается с сохранением расширения, чтобы ключ
    не превышал MAX_STORAGE_KEY_LENGTH.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    prefix = f"{timestamp_ms}-"
    name = sanitize_filename(filename)
    room = MAX_STORAGE_KEY_LENGTH - len(prefix)

    if len(name) > room:
        stem, ext = os.path.splitext(name)
        if len(ext) >= room:
            ext = ""
        name = stem[:room - len(ext)] + ext

    return prefix + name


def is_pdf_content_type(content_type: Optional[str]) -> bool:
    """Заявленный MIME-тип указывает на PDF"""
    return bool(content_type) and "pdf" in content_type.lower()


class Document:
    """Сущность документа: метаданные загруженного PDF"""

    def __init__(
        self,
        uuid: uuid.UUID,
        name: str,
        storage_key: str,
        owner_id: uuid.UUID,
        share_token: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.name = name
        self.storage_key = storage_key
        self.owner_id = owner_id
        self.share_token = share_token
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def is_shared(self) -> bool:
        return self.share_token is not None

    def rename(self, new_name: str) -> None:
        """Переименование документа; ключ хранилища не меняется"""
        self.name = new_name
        self.updated_at = datetime.utcnow()

    def assign_share_token(self, token: str) -> None:
        self.share_token = token
        self.updated_at = datetime.utcnow()

    def revoke_share_token(self) -> None:
        self.share_token = None
        self.updated_at = datetime.utcnow()

    @classmethod
    def create_document(
        cls,
        name: str,
        owner_id: uuid.UUID,
        timestamp_ms: Optional[int] = None
    ) -> "Document":
        """Создание нового документа; токен ссылки выдается позже"""
        return cls(
            uuid=uuid.uuid4(),
            name=name,
            storage_key=build_storage_key(name, timestamp_ms),
            owner_id=owner_id
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, name={self.name}, shared={self.is_shared})"
