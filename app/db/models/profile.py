from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Profile(BaseModel):
    """Публичная проекция аккаунта: ключ совпадает с users.uuid"""

    __tablename__ = "profiles"

    uuid = Column(Uuid(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True)
    display_name = Column(String(100), nullable=False, default="")

    # Relationships
    user = relationship("User", back_populates="profile")
