from datetime import datetime
import uuid

from sqlalchemy import Column, DateTime, Uuid

from app.core.db import Base


class BaseModel(Base):
    """Общие колонки всех таблиц: UUID-ключ и временные метки"""

    __abstract__ = True

    uuid = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
