from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.auth import get_current_user
from app.core.db import get_db
from app.domains.identity.entities import User
from app.domains.identity.schemas import ProfileResponse, ProfileUpdate
from app.domains.identity.services import IdentityService

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _profile_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Profile not found"
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Профиль текущего пользователя"""
    profile = await IdentityService(db).get_profile(current_user.uuid)

    if not profile:
        raise _profile_not_found()

    return ProfileResponse.model_validate(profile)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Смена отображаемого имени"""
    profile = await IdentityService(db).update_display_name(current_user.uuid, profile_data.display_name)

    if not profile:
        raise _profile_not_found()

    return ProfileResponse.model_validate(profile)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Публичный профиль: только отображаемое имя"""
    profile = await IdentityService(db).get_profile(user_id)

    if not profile:
        raise _profile_not_found()

    return ProfileResponse.model_validate(profile)
