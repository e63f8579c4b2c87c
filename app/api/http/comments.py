from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.auth import get_principal
from app.core.db import get_db
from app.domains.access.policies import Principal
from app.domains.comments.schemas import CommentCreate, CommentUpdate, CommentResponse, CommentListResponse
from app.domains.comments.services import CommentService
from app.realtime.feed import CommentFeed, get_feed

router = APIRouter(prefix="/documents/{document_id}/comments", tags=["comments"])


@router.get("", response_model=CommentListResponse)
async def list_comments(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db)
):
    """Комментарии документа в порядке создания"""
    comments = await CommentService(db).list_comments(document_id, principal)
    return CommentListResponse(
        comments=[CommentResponse.from_entity(comment) for comment in comments],
        total=len(comments)
    )


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    document_id: uuid.UUID,
    comment_data: CommentCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    feed: CommentFeed = Depends(get_feed)
):
    """Добавление комментария; гость публикует без автора"""
    comment = await CommentService(db, feed).add_comment(document_id, principal, comment_data.body)
    return CommentResponse.from_entity(comment)


@router.patch("/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    document_id: uuid.UUID,
    comment_id: uuid.UUID,
    comment_data: CommentUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db)
):
    """Изменение своего комментария"""
    comment = await CommentService(db).edit_comment(document_id, comment_id, principal, comment_data.body)
    return CommentResponse.from_entity(comment)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    document_id: uuid.UUID,
    comment_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db)
):
    """Удаление своего комментария"""
    await CommentService(db).delete_comment(document_id, comment_id, principal)
