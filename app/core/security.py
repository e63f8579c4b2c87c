from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import hashlib
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

# Контекст для хеширования паролей
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
PASSWORD_RESET_TOKEN_TYPE = "password_reset"
FILE_REFERENCE_TOKEN_TYPE = "file"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля"""
    # bcrypt имеет ограничение 72 байта
    return pwd_context.verify(plain_password[:72], hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля"""
    return pwd_context.hash(password[:72])


def _encode(data: Dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.utcnow() + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, token_type: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    if payload.get("type") != token_type:
        return None

    return payload


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Создание JWT токена доступа"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN_TYPE, expires_delta)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Проверка JWT токена доступа и извлечение данных"""
    return _decode(token, ACCESS_TOKEN_TYPE)


def password_fingerprint(password_hash: str) -> str:
    """Отпечаток текущего хеша пароля.

    Токен сброса содержит отпечаток, поэтому после смены пароля
    ранее выданные токены перестают действовать.
    """
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def create_password_reset_token(user_id: str, password_hash: str) -> str:
    """Создание токена сброса пароля"""
    return _encode(
        {"sub": user_id, "fp": password_fingerprint(password_hash)},
        PASSWORD_RESET_TOKEN_TYPE,
        timedelta(minutes=settings.password_reset_expire_minutes),
    )


def verify_password_reset_token(token: str) -> Optional[Dict[str, Any]]:
    """Проверка токена сброса пароля"""
    return _decode(token, PASSWORD_RESET_TOKEN_TYPE)


def create_file_reference(storage_key: str, bucket: str, ttl_seconds: Optional[int] = None) -> str:
    """Создание кратковременной подписанной ссылки на объект хранилища"""
    if ttl_seconds is None:
        ttl_seconds = settings.signed_url_ttl_seconds
    return _encode(
        {"key": storage_key, "bucket": bucket},
        FILE_REFERENCE_TOKEN_TYPE,
        timedelta(seconds=ttl_seconds),
    )


def verify_file_reference(token: str) -> Optional[Dict[str, Any]]:
    """Проверка подписанной ссылки на объект хранилища"""
    return _decode(token, FILE_REFERENCE_TOKEN_TYPE)

