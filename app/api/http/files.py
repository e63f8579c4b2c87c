from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_principal
from app.core.db import get_db
from app.domains.access.policies import Principal
from app.domains.documents.entities import PDF_CONTENT_TYPE
from app.domains.documents.services import DocumentService
from app.storage import StorageBackend, get_storage

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{reference}")
async def download_file(
    reference: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    storage: StorageBackend = Depends(get_storage)
):
    """Отдача PDF по кратковременной подписанной ссылке"""
    data = await DocumentService(db, storage).read_file(reference, principal)
    return Response(
        content=data,
        media_type=PDF_CONTENT_TYPE,
        headers={"Cache-Control": "private, no-store"}
    )
