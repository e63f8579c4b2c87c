from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from app.core.config import settings
from app.core.exceptions import (
    DocumentPersistenceError, NotFoundOrForbidden, PayloadTooLarge, ValidationFailed
)
from app.core.security import create_file_reference, verify_file_reference
from app.db.repositories.document_repository import DocumentRepository
from app.domains.access.policies import Action, DocumentPolicy, Principal, StoragePolicy, ensure
from app.domains.documents.entities import Document, PDF_CONTENT_TYPE, is_pdf_content_type
from app.storage.base import ObjectNotFound, StorageBackend

logger = logging.getLogger(__name__)


def validate_upload(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    """Проверка загрузки до любых обращений к хранилищу и БД"""
    if not filename or not filename.strip():
        raise ValidationFailed("File name is required")

    if len(filename) > 255:
        raise ValidationFailed("File name is too long")

    if not is_pdf_content_type(content_type):
        raise ValidationFailed("Please upload a PDF file")

    if size == 0:
        raise ValidationFailed("File is empty")

    if size > settings.max_upload_bytes:
        raise PayloadTooLarge(f"File exceeds maximum size of {settings.max_upload_bytes} bytes")


class DocumentService:
    """Сервис для работы с документами"""

    def __init__(self, session: AsyncSession, storage: StorageBackend):
        self.session = session
        self.storage = storage
        self.document_repository = DocumentRepository(session)
        self.storage_policy = StoragePolicy(storage.bucket)

    async def upload_document(
        self,
        principal: Principal,
        filename: str,
        content_type: Optional[str],
        data: bytes,
        timestamp_ms: Optional[int] = None
    ) -> Document:
        """Загрузка PDF: сохранение объекта, затем запись метаданных.

        Две операции не образуют транзакцию. Если запись не удалась,
        объект удаляется компенсирующим действием; если не удалось и оно,
        ключ пишется в лог и остается для reconcile_storage.
        """
        validate_upload(filename, content_type, len(data))

        document = Document.create_document(
            name=filename,
            owner_id=principal.user_id,
            timestamp_ms=timestamp_ms
        )

        ensure(DocumentPolicy.can_create(principal, document.owner_id), Action.CREATE, "documents")
        self.storage_policy.check(principal, Action.CREATE, self.storage.bucket)

        await self.storage.put(document.storage_key, data, PDF_CONTENT_TYPE)

        try:
            created = await self.document_repository.create(document)
        except Exception as e:
            logger.error(f"Metadata insert failed for {document.storage_key}: {e}")
            await self._compensate_upload(document.storage_key)
            raise DocumentPersistenceError()

        logger.info(f"Document {created.uuid} uploaded by {principal.user_id}")
        return created

    async def _compensate_upload(self, storage_key: str) -> None:
        try:
            await self.storage.delete(storage_key)
        except Exception as e:
            logger.error(f"Orphaned storage object {storage_key} left for reconciliation: {e}")

    async def get_document(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        """Получение документа, видимого субъекту"""
        document = await self.document_repository.get_visible(document_uuid, principal)

        if not document:
            raise NotFoundOrForbidden("Document not found")

        DocumentPolicy.check(principal, Action.READ, document)
        return document

    async def list_documents(
        self,
        principal: Principal,
        query: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> Tuple[List[Document], int]:
        """Документы владельца с поиском по имени"""
        documents = await self.document_repository.list_owned(principal, query, limit, offset)
        total = await self.document_repository.count_owned(principal, query)
        return documents, total

    async def rename_document(self, document_uuid: uuid.UUID, principal: Principal, new_name: str) -> Document:
        """Переименование документа (только метаданные)"""
        document = await self.get_document(document_uuid, principal)
        DocumentPolicy.check(principal, Action.UPDATE, document)

        document.rename(new_name)
        return await self.document_repository.update(document)

    async def delete_document(self, document_uuid: uuid.UUID, principal: Principal) -> None:
        """Удаление записи и объекта; комментарии удаляются каскадно"""
        document = await self.get_document(document_uuid, principal)
        DocumentPolicy.check(principal, Action.DELETE, document)
        self.storage_policy.check(principal, Action.DELETE, self.storage.bucket)

        await self.document_repository.delete(document.uuid)

        try:
            await self.storage.delete(document.storage_key)
        except Exception as e:
            logger.error(f"Orphaned storage object {document.storage_key} left for reconciliation: {e}")

        logger.info(f"Document {document.uuid} deleted by {principal.user_id}")

    def file_reference(self, document: Document) -> Tuple[str, int]:
        """Подписанная ссылка на файл и ее срок жизни в секундах"""
        ttl = settings.signed_url_ttl_seconds
        return create_file_reference(document.storage_key, self.storage.bucket, ttl), ttl

    async def read_file(self, reference: str, principal: Principal) -> bytes:
        """Чтение файла по подписанной ссылке; просроченная ссылка неотличима от отсутствующей"""
        payload = verify_file_reference(reference)
        if not payload:
            raise NotFoundOrForbidden("File not found")

        bucket = payload.get("bucket")
        self.storage_policy.check(principal, Action.READ, bucket)

        try:
            return await self.storage.get(payload.get("key"))
        except ObjectNotFound:
            raise NotFoundOrForbidden("File not found")

    async def reconcile_storage(self, grace_seconds: Optional[int] = None, dry_run: bool = False) -> List[str]:
        """Удаление объектов, на которые не ссылается ни одна запись.

        Обслуживающая операция оператора, не запрос пользователя. Объекты
        моложе grace_seconds пропускаются, чтобы не задеть загрузку,
        запись о которой еще не закоммичена.
        """
        if grace_seconds is None:
            grace_seconds = settings.orphan_grace_seconds

        referenced = await self.document_repository.all_storage_keys()
        cutoff = datetime.utcnow() - timedelta(seconds=grace_seconds)

        orphans = [
            obj.key for obj in await self.storage.list_objects()
            if obj.key not in referenced and obj.modified_at <= cutoff
        ]

        if not dry_run:
            for key in orphans:
                await self.storage.delete(key)
                logger.warning(f"Removed orphaned storage object {key}")

        return orphans
