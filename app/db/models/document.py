from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"

    name = Column(String(255), nullable=False)
    storage_key = Column(String(512), unique=True, nullable=False)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=False, index=True)
    share_token = Column(String(64), unique=True, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="owned_documents")
    comments = relationship("Comment", back_populates="document", passive_deletes=True)
