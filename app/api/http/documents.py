from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.core.auth import get_principal, get_user_principal
from app.core.config import settings
from app.core.db import get_db
from app.core.exceptions import ValidationFailed
from app.core.notifications import LoggingNotifier, get_notifier
from app.domains.access.policies import DocumentPolicy, Principal
from app.domains.documents.entities import Document
from app.domains.documents.schemas import (
    DocumentRename, DocumentResponse, DocumentListResponse, ShareResponse, ShareInviteRequest
)
from app.domains.documents.services import DocumentService
from app.domains.sharing.services import SharingService, build_share_link
from app.storage import StorageBackend, get_storage

router = APIRouter(prefix="/documents", tags=["documents"])


def build_document_response(
    document: Document,
    principal: Principal,
    document_service: DocumentService
) -> DocumentResponse:
    """Ответ с подписанной ссылкой на файл; ссылка общего доступа только владельцу"""
    reference, expires_in = document_service.file_reference(document)
    share_url = None
    if document.is_shared and DocumentPolicy.is_owner(principal, document):
        share_url = build_share_link(document.share_token)

    return DocumentResponse(
        uuid=document.uuid,
        name=document.name,
        storage_key=document.storage_key,
        owner_id=document.owner_id,
        is_shared=document.is_shared,
        share_url=share_url,
        file_url=f"{settings.public_origin}/files/{reference}",
        file_url_expires_in=expires_in,
        created_at=document.created_at,
        updated_at=document.updated_at
    )


def _share_response(document: Document) -> ShareResponse:
    return ShareResponse(
        document_id=document.uuid,
        share_token=document.share_token,
        share_url=build_share_link(document.share_token)
    )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: List[UploadFile] = File(...),
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Загрузка PDF (ровно один файл в поле file)"""
    if len(file) != 1:
        raise ValidationFailed("Exactly one file must be uploaded")

    upload = file[0]
    # Читаем на байт больше лимита, чтобы отличить превышение
    data = await upload.read(settings.max_upload_bytes + 1)

    document_service = DocumentService(db, storage)
    document = await document_service.upload_document(
        principal,
        filename=upload.filename,
        content_type=upload.content_type,
        data=data
    )

    return build_document_response(document, principal, document_service)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    q: Optional[str] = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Список документов текущего пользователя"""
    document_service = DocumentService(db, storage)

    offset = (page - 1) * per_page
    documents, total = await document_service.list_documents(
        principal,
        query=q,
        limit=per_page,
        offset=offset
    )

    return DocumentListResponse(
        documents=[build_document_response(doc, principal, document_service) for doc in documents],
        total=total,
        page=page,
        per_page=per_page
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Получение документа владельцем или по токену ссылки"""
    document_service = DocumentService(db, storage)
    document = await document_service.get_document(document_id, principal)
    return build_document_response(document, principal, document_service)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def rename_document(
    document_id: uuid.UUID,
    rename_data: DocumentRename,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Переименование документа"""
    document_service = DocumentService(db, storage)
    document = await document_service.rename_document(document_id, principal, rename_data.name)
    return build_document_response(document, principal, document_service)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Удаление документа вместе с файлом и комментариями"""
    await DocumentService(db, storage).delete_document(document_id, principal)


@router.post("/{document_id}/share", response_model=ShareResponse)
async def share_document(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db)
):
    """Ссылка общего доступа; повторный вызов возвращает ту же ссылку"""
    document = await SharingService(db).share_document(document_id, principal)
    return _share_response(document)


@router.post("/{document_id}/share/rotate", response_model=ShareResponse)
async def rotate_share_token(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db)
):
    """Новая ссылка взамен старой"""
    document = await SharingService(db).rotate_share_token(document_id, principal)
    return _share_response(document)


@router.delete("/{document_id}/share", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_share_token(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db)
):
    """Отзыв ссылки общего доступа"""
    await SharingService(db).revoke_share_token(document_id, principal)


@router.post("/{document_id}/share/invite", response_model=ShareResponse)
async def invite_to_document(
    document_id: uuid.UUID,
    invite_data: ShareInviteRequest,
    principal: Principal = Depends(get_user_principal),
    db: AsyncSession = Depends(get_db),
    notifier: LoggingNotifier = Depends(get_notifier)
):
    """Отправка ссылки на документ по email"""
    document = await SharingService(db).invite(document_id, principal, invite_data.email, notifier)
    return _share_response(document)
