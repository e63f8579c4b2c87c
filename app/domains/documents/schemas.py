from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
import uuid
from datetime import datetime


class DocumentRename(BaseModel):
    """Схема для переименования документа"""
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    uuid: uuid.UUID
    name: str
    storage_key: str
    owner_id: uuid.UUID
    is_shared: bool
    # Только для владельца
    share_url: Optional[str] = None
    file_url: str
    file_url_expires_in: int
    created_at: datetime
    updated_at: datetime


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentResponse]
    total: int
    page: int
    per_page: int


class ShareResponse(BaseModel):
    """Схема для ответа со ссылкой общего доступа"""
    document_id: uuid.UUID
    share_token: str
    share_url: str


class ShareInviteRequest(BaseModel):
    """Схема для приглашения по email"""
    email: EmailStr
