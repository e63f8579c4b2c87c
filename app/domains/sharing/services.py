from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import secrets
import uuid

from app.core.config import settings
from app.core.exceptions import NotFoundOrForbidden
from app.core.logging import mask_token
from app.core.notifications import LoggingNotifier
from app.db.repositories.document_repository import DocumentRepository
from app.domains.access.policies import Action, DocumentPolicy, Principal
from app.domains.documents.entities import Document

logger = logging.getLogger(__name__)

SHARE_TOKEN_BYTES = 32
_MAX_TOKEN_ATTEMPTS = 3


def generate_share_token() -> str:
    """Непредсказуемый токен ссылки (256 бит энтропии)"""
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)


def build_share_link(token: str) -> str:
    """Публичная ссылка: <origin>/shared/<token>"""
    return f"{settings.public_origin}/shared/{token}"


class SharingService:
    """Выдача, ротация и отзыв ссылок общего доступа.

    Ссылка открывает документ и его комментарии без входа. Идентификатор
    строки никогда не служит доступом: только отдельный токен, который
    владелец может заменить или отозвать.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)

    async def _get_owned(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        document = await self.document_repository.get_visible(document_uuid, principal)

        if not document:
            raise NotFoundOrForbidden("Document not found")

        DocumentPolicy.check(principal, Action.UPDATE, document)
        return document

    async def _store_new_token(self, document: Document) -> Document:
        for _ in range(_MAX_TOKEN_ATTEMPTS):
            document.assign_share_token(generate_share_token())
            try:
                return await self.document_repository.update(document)
            except ValueError:
                logger.warning(f"Share token collision for document {document.uuid}, retrying")
        raise RuntimeError("Could not allocate a unique share token")

    async def share_document(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        """Выдача ссылки; повторный вызов возвращает существующий токен"""
        document = await self._get_owned(document_uuid, principal)

        if document.is_shared:
            return document

        shared = await self._store_new_token(document)
        logger.info(f"Document {document.uuid} shared ({mask_token(shared.share_token)})")
        return shared

    async def rotate_share_token(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        """Замена токена; старая ссылка перестает работать"""
        document = await self._get_owned(document_uuid, principal)

        rotated = await self._store_new_token(document)
        logger.info(f"Share token rotated for document {document.uuid}")
        return rotated

    async def revoke_share_token(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        """Отзыв ссылки"""
        document = await self._get_owned(document_uuid, principal)

        if not document.is_shared:
            return document

        document.revoke_share_token()
        revoked = await self.document_repository.update(document)
        logger.info(f"Share token revoked for document {document.uuid}")
        return revoked

    async def resolve(self, share_token: Optional[str]) -> Document:
        """Документ по токену ссылки; неизвестный токен дает 404"""
        principal = Principal(share_token=share_token)
        document = await self.document_repository.get_by_share_token(share_token)

        if not document:
            raise NotFoundOrForbidden("Document not found")

        DocumentPolicy.check(principal, Action.READ, document)
        return document

    async def invite(
        self,
        document_uuid: uuid.UUID,
        principal: Principal,
        email: str,
        notifier: LoggingNotifier
    ) -> Document:
        """Отправка ссылки по email; ссылка выдается, если ее еще нет"""
        document = await self.share_document(document_uuid, principal)
        await notifier.send_share_invite(email, build_share_link(document.share_token), document.name)
        return document
