from typing import Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
import uuid

from app.db.models.user import User as UserModel
from app.db.models.profile import Profile as ProfileModel

if TYPE_CHECKING:
    from app.domains.identity.entities import User, Profile


class UserRepository:
    """Репозиторий для работы с пользователями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: "User", profile: "Profile") -> "User":
        """Создание пользователя вместе с профилем в одной транзакции"""
        db_user = UserModel(
            uuid=user.uuid,
            email=user.email,
            password_hash=user.password_hash,
            is_active=user.is_active
        )
        db_profile = ProfileModel(
            uuid=user.uuid,
            display_name=profile.display_name
        )

        self.session.add(db_user)
        self.session.add(db_profile)
        try:
            await self.session.commit()
            await self.session.refresh(db_user)
            return self._to_domain(db_user)
        except IntegrityError:
            await self.session.rollback()
            raise ValueError("User with this email already exists")

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional["User"]:
        """Получение пользователя по UUID"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.uuid == user_uuid)
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def get_by_email(self, email: str) -> Optional["User"]:
        """Получение пользователя по email"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    async def update(self, user: "User") -> "User":
        """Обновление пользователя"""
        stmt = (
            update(UserModel)
            .where(UserModel.uuid == user.uuid)
            .values(
                email=user.email,
                password_hash=user.password_hash,
                is_active=user.is_active,
                updated_at=user.updated_at
            )
        )

        await self.session.execute(stmt)
        await self.session.commit()

        return await self.get_by_uuid(user.uuid)

    async def email_exists(self, email: str) -> bool:
        """Проверка существования email"""
        result = await self.session.execute(
            select(UserModel.uuid).where(UserModel.email == email.lower())
        )
        return result.scalar_one_or_none() is not None

    def _to_domain(self, db_user: UserModel) -> "User":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.identity.entities import User

        return User(
            uuid=db_user.uuid,
            email=db_user.email,
            password_hash=db_user.password_hash,
            is_active=db_user.is_active,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at
        )
