from typing import List, Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
import uuid

from app.db.models.comment import Comment as CommentModel
from app.domains.access.policies import CommentPolicy, Principal

if TYPE_CHECKING:
    from app.domains.comments.entities import Comment


class CommentRepository:
    """Репозиторий для работы с комментариями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, comment: "Comment") -> "Comment":
        """Создание комментария"""
        db_comment = CommentModel(
            uuid=comment.uuid,
            document_id=comment.document_id,
            author_id=comment.author_id,
            body=comment.body
        )

        self.session.add(db_comment)
        await self.session.commit()
        await self.session.refresh(db_comment)
        return self._to_domain(db_comment)

    async def list_visible(
        self,
        document_id: uuid.UUID,
        principal: Principal,
        limit: int = 500,
        offset: int = 0
    ) -> List["Comment"]:
        """Комментарии документа по возрастанию времени создания"""
        result = await self.session.execute(
            select(CommentModel)
            .where(
                CommentModel.document_id == document_id,
                CommentPolicy.read_clause(principal)
            )
            .order_by(CommentModel.created_at.asc(), CommentModel.uuid.asc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(comment) for comment in result.scalars().all()]

    async def get_authored(
        self,
        comment_uuid: uuid.UUID,
        document_id: uuid.UUID,
        principal: Principal
    ) -> Optional["Comment"]:
        """Комментарий документа, написанный субъектом"""
        result = await self.session.execute(
            select(CommentModel).where(
                CommentModel.uuid == comment_uuid,
                CommentModel.document_id == document_id,
                CommentPolicy.author_clause(principal),
                CommentPolicy.read_clause(principal)
            )
        )
        db_comment = result.scalar_one_or_none()
        return self._to_domain(db_comment) if db_comment else None

    async def update(self, comment: "Comment") -> "Comment":
        """Обновление текста комментария"""
        stmt = (
            update(CommentModel)
            .where(CommentModel.uuid == comment.uuid)
            .values(body=comment.body, updated_at=comment.updated_at)
        )
        await self.session.execute(stmt)
        await self.session.commit()

        result = await self.session.execute(
            select(CommentModel).where(CommentModel.uuid == comment.uuid)
        )
        return self._to_domain(result.scalar_one())

    async def delete(self, comment_uuid: uuid.UUID) -> bool:
        """Удаление комментария"""
        stmt = delete(CommentModel).where(CommentModel.uuid == comment_uuid)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    def _to_domain(self, db_comment: CommentModel) -> "Comment":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.comments.entities import Comment

        return Comment(
            uuid=db_comment.uuid,
            document_id=db_comment.document_id,
            body=db_comment.body,
            author_id=db_comment.author_id,
            created_at=db_comment.created_at,
            updated_at=db_comment.updated_at
        )
