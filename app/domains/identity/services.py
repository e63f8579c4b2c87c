from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid

from app.core.security import (
    create_access_token, verify_token, create_password_reset_token,
    verify_password_reset_token, password_fingerprint
)
from app.db.repositories.user_repository import UserRepository
from app.db.repositories.profile_repository import ProfileRepository
from app.domains.identity.entities import User, Profile
from app.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)
        self.profile_repository = ProfileRepository(session)

    async def register_user(self, user_data: UserCreate) -> Tuple[User, Profile]:
        """Регистрация нового пользователя; профиль создается автоматически"""
        if await self.user_repository.email_exists(user_data.email):
            raise ValueError("Email already registered")

        user = User.create_user(email=user_data.email, password=user_data.password)
        profile = Profile.for_user(user, user_data.display_name)

        created = await self.user_repository.create(user, profile)
        logger.info(f"Registered user {created.uuid}")
        return created, profile

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email)

        if not user or not user.is_active:
            return None

        if not user.authenticate(login_data.password):
            return None

        return user

    async def login_user(self, login_data: UserLogin) -> Optional[str]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)

        if not user:
            logger.info("Failed login attempt")
            return None

        return create_access_token(data={"sub": str(user.uuid)})

    async def get_user_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        """Получение пользователя по UUID"""
        return await self.user_repository.get_by_uuid(user_uuid)

    async def get_profile(self, user_uuid: uuid.UUID) -> Optional[Profile]:
        """Получение профиля пользователя"""
        return await self.profile_repository.get_by_uuid(user_uuid)

    async def update_display_name(self, user_uuid: uuid.UUID, display_name: str) -> Optional[Profile]:
        """Смена отображаемого имени; старые комментарии покажут новое имя"""
        profile = await self.profile_repository.get_by_uuid(user_uuid)

        if not profile:
            return None

        profile.rename(display_name)
        return await self.profile_repository.update(profile)

    async def change_user_password(self, user_uuid: uuid.UUID, current_password: str, new_password: str) -> bool:
        """Смена пароля пользователя"""
        user = await self.user_repository.get_by_uuid(user_uuid)

        if not user:
            return False

        if not user.authenticate(current_password):
            raise ValueError("Current password is incorrect")

        user.set_password(new_password)
        await self.user_repository.update(user)
        return True

    async def request_password_reset(self, email: str) -> Optional[Tuple[User, str]]:
        """Выдача токена сброса пароля.

        Вызывающий код обязан отвечать одинаково независимо от результата,
        чтобы не раскрывать наличие аккаунта.
        """
        user = await self.user_repository.get_by_email(email)

        if not user or not user.is_active:
            return None

        token = create_password_reset_token(str(user.uuid), user.password_hash)
        logger.info(f"Issued password reset token for user {user.uuid}")
        return user, token

    async def reset_password(self, reset_token: str, new_password: str) -> bool:
        """Установка нового пароля по токену сброса.

        Состояние сброса передается явно в токене: в нем идентификатор
        пользователя и отпечаток текущего хеша пароля, поэтому токен
        перестает действовать после первой успешной смены.
        """
        payload = verify_password_reset_token(reset_token)
        if not payload:
            return False

        try:
            user_uuid = uuid.UUID(payload.get("sub"))
        except (TypeError, ValueError):
            return False

        user = await self.user_repository.get_by_uuid(user_uuid)
        if not user or not user.is_active:
            return False

        if payload.get("fp") != password_fingerprint(user.password_hash):
            logger.info(f"Stale password reset token for user {user.uuid}")
            return False

        user.set_password(new_password)
        await self.user_repository.update(user)
        logger.info(f"Password reset completed for user {user.uuid}")
        return True

    async def get_current_user_from_token(self, token: str) -> Optional[User]:
        """Получение текущего пользователя из JWT токена"""
        payload = verify_token(token)
        if not payload:
            return None

        try:
            user_uuid = uuid.UUID(payload.get("sub"))
        except (TypeError, ValueError):
            return None

        user = await self.user_repository.get_by_uuid(user_uuid)

        if user is None or not user.is_active:
            return None

        return user
