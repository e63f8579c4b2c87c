import uuid
from datetime import datetime
from typing import Optional

from app.core.security import get_password_hash, verify_password

GUEST_LABEL = "Guest"


class User:
    """Сущность пользователя домена Identity"""

    def __init__(
        self,
        uuid: uuid.UUID,
        email: str,
        password_hash: str,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.email = email
        self.password_hash = password_hash
        self.is_active = is_active
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)

    def set_password(self, new_password: str) -> None:
        """Установка нового пароля"""
        self.password_hash = get_password_hash(new_password)
        self.updated_at = datetime.utcnow()

    @classmethod
    def create_user(cls, email: str, password: str) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            uuid=uuid.uuid4(),
            email=email.lower(),
            password_hash=get_password_hash(password)
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, email={self.email})"


class Profile:
    """Публичная проекция пользователя: только отображаемое имя"""

    def __init__(
        self,
        uuid: uuid.UUID,
        display_name: str = "",
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.display_name = display_name
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def label(self) -> str:
        """Подпись под комментарием; пустое имя показывается как гость"""
        return self.display_name.strip() or GUEST_LABEL

    def rename(self, display_name: str) -> None:
        self.display_name = display_name
        self.updated_at = datetime.utcnow()

    @classmethod
    def for_user(cls, user: User, display_name: str) -> "Profile":
        """Профиль создается вместе с аккаунтом"""
        return cls(uuid=user.uuid, display_name=display_name)

    def __repr__(self) -> str:
        return f"Profile(uuid={self.uuid}, display_name={self.display_name})"
