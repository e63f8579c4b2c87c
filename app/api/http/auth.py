from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.db import get_db
from app.core.notifications import LoggingNotifier, get_notifier
from app.domains.identity.entities import User
from app.domains.identity.schemas import (
    UserCreate, UserLogin, UserResponse, Token, PasswordChange,
    PasswordResetRequest, PasswordResetConfirm
)
from app.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])


def _user_response(user: User, display_name: str) -> UserResponse:
    return UserResponse(
        uuid=user.uuid,
        email=user.email,
        display_name=display_name,
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Регистрация нового пользователя"""
    identity_service = IdentityService(db)

    try:
        user, profile = await identity_service.register_user(user_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return _user_response(user, profile.display_name)


@router.post("/login", response_model=Token)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Вход пользователя"""
    identity_service = IdentityService(db)

    token = await identity_service.login_user(login_data)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение информации о текущем пользователе"""
    profile = await IdentityService(db).get_profile(current_user.uuid)
    return _user_response(current_user, profile.display_name if profile else "")


@router.post("/change-password")
async def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Смена пароля"""
    identity_service = IdentityService(db)

    try:
        await identity_service.change_user_password(
            current_user.uuid,
            password_data.current_password,
            password_data.new_password
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    return {"message": "Password changed successfully"}


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def request_password_reset(
    request_data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    notifier: LoggingNotifier = Depends(get_notifier)
):
    """Запрос сброса пароля; ответ не зависит от наличия аккаунта"""
    issued = await IdentityService(db).request_password_reset(request_data.email)

    if issued:
        user, reset_token = issued
        reset_link = f"{settings.public_origin}/reset-password?token={reset_token}"
        await notifier.send_password_reset(user.email, reset_link, reset_token)

    return {"message": "If the account exists, a reset link has been sent"}


@router.post("/password-reset/confirm")
async def confirm_password_reset(
    confirm_data: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db)
):
    """Установка нового пароля по токену сброса"""
    reset = await IdentityService(db).reset_password(
        confirm_data.reset_token,
        confirm_data.new_password
    )

    if not reset:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )

    return {"message": "Password has been reset"}
