from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.api.http.documents import build_document_response
from app.core.auth import get_optional_user
from app.core.db import get_db
from app.domains.access.policies import Principal
from app.domains.comments.schemas import CommentCreate, CommentResponse, CommentListResponse
from app.domains.comments.services import CommentService
from app.domains.documents.schemas import DocumentResponse
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User
from app.domains.sharing.services import SharingService
from app.realtime.feed import CommentFeed, get_feed
from app.storage import StorageBackend, get_storage

router = APIRouter(prefix="/shared", tags=["sharing"])


def _link_principal(user: Optional[User], token: str) -> Principal:
    return Principal(user_id=user.uuid if user else None, share_token=token)


@router.get("/{token}", response_model=DocumentResponse)
async def open_shared_document(
    token: str,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Открытие документа по ссылке без входа"""
    document = await SharingService(db).resolve(token)
    return build_document_response(document, _link_principal(user, token), DocumentService(db, storage))


@router.get("/{token}/comments", response_model=CommentListResponse)
async def list_shared_comments(
    token: str,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Комментарии документа, открытого по ссылке"""
    document = await SharingService(db).resolve(token)
    comments = await CommentService(db).list_comments(document.uuid, _link_principal(user, token))
    return CommentListResponse(
        comments=[CommentResponse.from_entity(comment) for comment in comments],
        total=len(comments)
    )


@router.post("/{token}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_shared_comment(
    token: str,
    comment_data: CommentCreate,
    user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
    feed: CommentFeed = Depends(get_feed)
):
    """Комментарий по ссылке; без входа автор не указывается"""
    document = await SharingService(db).resolve(token)
    comment = await CommentService(db, feed).add_comment(
        document.uuid,
        _link_principal(user, token),
        comment_data.body
    )
    return CommentResponse.from_entity(comment)
