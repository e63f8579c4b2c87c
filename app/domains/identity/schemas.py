from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from typing import Optional
from datetime import datetime
import uuid


def _check_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if not any(c.isupper() for c in v):
        raise ValueError('Password must contain at least one uppercase letter')
    if not any(c.islower() for c in v):
        raise ValueError('Password must contain at least one lowercase letter')
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one digit')
    return v


def _check_display_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError('Display name cannot be empty')
    return v


class UserCreate(BaseModel):
    """Схема для регистрации пользователя"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        return _check_display_name(v)


class UserLogin(BaseModel):
    """Схема для входа пользователя"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Схема для ответа с данными пользователя"""
    uuid: uuid.UUID
    email: EmailStr
    display_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Схема для JWT токена"""
    access_token: str
    token_type: str = "bearer"


class PasswordChange(BaseModel):
    """Схема для смены пароля"""
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        return _check_password_strength(v)


class PasswordResetRequest(BaseModel):
    """Запрос на сброс пароля"""
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    """Установка нового пароля по токену сброса"""
    reset_token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        return _check_password_strength(v)


class ProfileUpdate(BaseModel):
    """Схема для обновления профиля"""
    display_name: str = Field(..., min_length=1, max_length=100)

    @field_validator('display_name')
    @classmethod
    def validate_display_name(cls, v):
        return _check_display_name(v)


class ProfileResponse(BaseModel):
    """Публичные данные профиля"""
    uuid: uuid.UUID
    display_name: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
