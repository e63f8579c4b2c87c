from app.domains.documents.entities import Document, build_storage_key, sanitize_filename, is_pdf_content_type
from app.domains.documents.schemas import (
    DocumentRename, DocumentResponse, DocumentListResponse, ShareResponse, ShareInviteRequest
)
from app.domains.documents.services import DocumentService, validate_upload

__all__ = [
    "Document", "build_storage_key", "sanitize_filename", "is_pdf_content_type",
    "DocumentRename", "DocumentResponse", "DocumentListResponse", "ShareResponse", "ShareInviteRequest",
    "DocumentService", "validate_upload"
]
