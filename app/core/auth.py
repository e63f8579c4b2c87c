from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.db import get_db
from app.core.exceptions import AuthenticationFailed
from app.domains.access.policies import Principal
from app.domains.identity.entities import User
from app.domains.identity.services import IdentityService

# auto_error=False: гости приходят без заголовка Authorization
security = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Пользователь, если передан токен; неверный токен дает 401, а не гостя"""
    if credentials is None:
        return None

    user = await IdentityService(db).get_current_user_from_token(credentials.credentials)
    if not user:
        raise AuthenticationFailed()

    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Зависимость для получения текущего пользователя"""
    if user is None:
        raise AuthenticationFailed()
    return user


async def get_principal(
    user: Optional[User] = Depends(get_optional_user),
    x_share_token: Optional[str] = Header(None)
) -> Principal:
    """Субъект запроса: пользователь и/или токен ссылки из X-Share-Token"""
    return Principal(user_id=user.uuid if user else None, share_token=x_share_token or None)


async def get_user_principal(user: User = Depends(get_current_user)) -> Principal:
    """Субъект запроса, требующего входа"""
    return Principal(user_id=user.uuid)


async def principal_from_tokens(
    db: AsyncSession,
    access_token: Optional[str],
    share_token: Optional[str]
) -> Optional[Principal]:
    """Субъект для WebSocket по параметрам запроса; None при неверном access_token"""
    user_id = None
    if access_token:
        user = await IdentityService(db).get_current_user_from_token(access_token)
        if not user:
            return None
        user_id = user.uuid

    return Principal(user_id=user_id, share_token=share_token or None)
