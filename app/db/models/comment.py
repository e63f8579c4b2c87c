from sqlalchemy import Column, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Comment(BaseModel):
    __tablename__ = "comments"

    document_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("documents.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # NULL означает гостя
    author_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=True)
    body = Column(Text, nullable=False)

    # Relationships
    document = relationship("Document", back_populates="comments")
    author = relationship("User")
