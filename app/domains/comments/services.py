from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from app.core.exceptions import NotFoundOrForbidden, ValidationFailed
from app.db.repositories.comment_repository import CommentRepository
from app.db.repositories.document_repository import DocumentRepository
from app.db.repositories.profile_repository import ProfileRepository
from app.domains.access.policies import Action, CommentPolicy, Principal, ensure
from app.domains.comments.entities import Comment
from app.domains.comments.formatting import format_comment_body, plain_text
from app.domains.documents.entities import Document
from app.domains.identity.entities import GUEST_LABEL
from app.realtime.feed import CommentFeed

logger = logging.getLogger(__name__)


class CommentService:
    """Сервис для работы с комментариями"""

    def __init__(self, session: AsyncSession, feed: Optional[CommentFeed] = None):
        self.session = session
        self.feed = feed
        self.comment_repository = CommentRepository(session)
        self.document_repository = DocumentRepository(session)
        self.profile_repository = ProfileRepository(session)

    async def get_readable_document(self, document_uuid: uuid.UUID, principal: Principal) -> Document:
        """Документ, комментарии которого доступны субъекту"""
        document = await self.document_repository.get_visible(document_uuid, principal)

        if not document or not CommentPolicy.can_read(principal, document):
            raise NotFoundOrForbidden("Document not found")

        return document

    async def add_comment(self, document_uuid: uuid.UUID, principal: Principal, raw_body: str) -> Comment:
        """Добавление комментария.

        Автором становится вошедший пользователь, гость публикует без
        автора. Пустой после очистки текст отклоняется до записи в БД.
        """
        body = self._render_body(raw_body)
        document = await self.get_readable_document(document_uuid, principal)

        comment = Comment.create_comment(
            document_id=document.uuid,
            body=body,
            author_id=principal.user_id
        )
        ensure(
            CommentPolicy.can_create(principal, document, comment.author_id),
            Action.CREATE,
            f"comments of document {document.uuid}"
        )

        created = await self.comment_repository.create(comment)
        logger.info(f"Comment {created.uuid} added to document {document.uuid}")

        if self.feed is not None:
            await self.feed.publish(created)

        await self.enrich([created])
        return created

    async def edit_comment(
        self,
        document_uuid: uuid.UUID,
        comment_uuid: uuid.UUID,
        principal: Principal,
        raw_body: str
    ) -> Comment:
        """Изменение текста своего комментария; новый текст проходит ту же очистку"""
        body = self._render_body(raw_body)
        document, comment = await self._get_authored(document_uuid, comment_uuid, principal)
        ensure(
            CommentPolicy.can_update(principal, document, comment),
            Action.UPDATE,
            f"comment {comment.uuid}"
        )

        comment.edit(body)
        updated = await self.comment_repository.update(comment)
        logger.info(f"Comment {updated.uuid} edited by {principal.user_id}")

        await self.enrich([updated])
        return updated

    async def delete_comment(
        self,
        document_uuid: uuid.UUID,
        comment_uuid: uuid.UUID,
        principal: Principal
    ) -> None:
        """Удаление своего комментария"""
        document, comment = await self._get_authored(document_uuid, comment_uuid, principal)
        ensure(
            CommentPolicy.can_delete(principal, document, comment),
            Action.DELETE,
            f"comment {comment.uuid}"
        )

        await self.comment_repository.delete(comment.uuid)
        logger.info(f"Comment {comment.uuid} deleted by {principal.user_id}")

    async def _get_authored(
        self,
        document_uuid: uuid.UUID,
        comment_uuid: uuid.UUID,
        principal: Principal
    ) -> Tuple[Document, Comment]:
        document = await self.get_readable_document(document_uuid, principal)
        comment = await self.comment_repository.get_authored(comment_uuid, document.uuid, principal)

        if not comment:
            raise NotFoundOrForbidden("Comment not found")

        return document, comment

    @staticmethod
    def _render_body(raw_body: str) -> str:
        """Пустой после очистки текст отклоняется до записи в БД"""
        if not raw_body or not raw_body.strip():
            raise ValidationFailed("Comment cannot be empty")

        body = format_comment_body(raw_body)
        if not plain_text(body):
            raise ValidationFailed("Comment cannot be empty")

        return body

    async def list_comments(
        self,
        document_uuid: uuid.UUID,
        principal: Principal,
        limit: int = 500,
        offset: int = 0
    ) -> List[Comment]:
        """Комментарии документа по возрастанию времени с именами авторов"""
        document = await self.get_readable_document(document_uuid, principal)

        comments = await self.comment_repository.list_visible(document.uuid, principal, limit, offset)
        return await self.enrich(comments)

    async def enrich(self, comments: List[Comment]) -> List[Comment]:
        """Подстановка текущих отображаемых имен авторов.

        Имя читается из профиля при каждой выдаче, поэтому переименование
        отражается и на старых комментариях.
        """
        profiles = await self.profile_repository.get_many(c.author_id for c in comments)

        for comment in comments:
            profile = profiles.get(comment.author_id)
            comment.author_name = profile.label if profile else GUEST_LABEL

        return comments
