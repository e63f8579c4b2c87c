from pydantic import BaseModel, Field
from typing import Optional, List
import uuid
from datetime import datetime

from app.domains.comments.entities import Comment


class CommentCreate(BaseModel):
    """Схема для создания комментария"""
    body: str = Field(..., max_length=10000)


class CommentUpdate(BaseModel):
    """Схема для изменения комментария"""
    body: str = Field(..., max_length=10000)


class CommentResponse(BaseModel):
    """Схема для ответа с данными комментария"""
    uuid: uuid.UUID
    document_id: uuid.UUID
    author_id: Optional[uuid.UUID] = None
    author_name: str
    body: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, comment: Comment) -> "CommentResponse":
        return cls(
            uuid=comment.uuid,
            document_id=comment.document_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            body=comment.body,
            created_at=comment.created_at,
            updated_at=comment.updated_at
        )


class CommentListResponse(BaseModel):
    """Схема для списка комментариев"""
    comments: List[CommentResponse]
    total: int
