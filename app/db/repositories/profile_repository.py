from typing import Dict, Iterable, Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import uuid

from app.db.models.profile import Profile as ProfileModel

if TYPE_CHECKING:
    from app.domains.identity.entities import Profile


class ProfileRepository:
    """Репозиторий для работы с профилями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional["Profile"]:
        """Получение профиля по UUID пользователя"""
        result = await self.session.execute(
            select(ProfileModel).where(ProfileModel.uuid == user_uuid)
        )
        db_profile = result.scalar_one_or_none()
        return self._to_domain(db_profile) if db_profile else None

    async def get_many(self, user_uuids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, "Profile"]:
        """Получение профилей пачкой: {uuid: Profile}"""
        ids = {user_uuid for user_uuid in user_uuids if user_uuid is not None}
        if not ids:
            return {}

        result = await self.session.execute(
            select(ProfileModel).where(ProfileModel.uuid.in_(ids))
        )
        return {
            db_profile.uuid: self._to_domain(db_profile)
            for db_profile in result.scalars().all()
        }

    async def update(self, profile: "Profile") -> "Profile":
        """Обновление профиля"""
        await self.session.execute(
            update(ProfileModel)
            .where(ProfileModel.uuid == profile.uuid)
            .values(display_name=profile.display_name, updated_at=profile.updated_at)
        )
        await self.session.commit()

        return await self.get_by_uuid(profile.uuid)

    def _to_domain(self, db_profile: ProfileModel) -> "Profile":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.identity.entities import Profile

        return Profile(
            uuid=db_profile.uuid,
            display_name=db_profile.display_name,
            created_at=db_profile.created_at,
            updated_at=db_profile.updated_at
        )
