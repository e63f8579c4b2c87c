import uuid
from datetime import datetime
from typing import Optional

from app.domains.identity.entities import GUEST_LABEL


class Comment:
    """Сущность комментария к документу"""

    def __init__(
        self,
        uuid: uuid.UUID,
        document_id: uuid.UUID,
        body: str,
        author_id: Optional[uuid.UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.document_id = document_id
        self.body = body
        self.author_id = author_id
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()
        # Заполняется при обогащении перед выдачей
        self.author_name: str = GUEST_LABEL

    @property
    def is_guest(self) -> bool:
        return self.author_id is None

    def edit(self, body: str) -> None:
        """Замена текста; время создания и автор не меняются"""
        self.body = body
        self.updated_at = datetime.utcnow()

    @classmethod
    def create_comment(
        cls,
        document_id: uuid.UUID,
        body: str,
        author_id: Optional[uuid.UUID] = None
    ) -> "Comment":
        """Создание нового комментария"""
        return cls(
            uuid=uuid.uuid4(),
            document_id=document_id,
            body=body,
            author_id=author_id
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Comment):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Comment(uuid={self.uuid}, document_id={self.document_id}, guest={self.is_guest})"
