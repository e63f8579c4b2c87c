"""Политики доступа к документам, объектам хранилища и комментариям.

Все правила авторизации собраны в этом модуле. Каждое правило существует
в двух формах: как булев предикат над доменной сущностью и как SQL-условие,
которое репозитории добавляют в WHERE. Так одни и те же правила действуют
для HTTP-запросов, подписки на ленту комментариев и выдачи файлов.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import hmac
import logging
import uuid

from sqlalchemy import and_, exists, false, or_, select

from app.core.exceptions import NotFoundOrForbidden
from app.db.models.comment import Comment as CommentModel
from app.db.models.document import Document as DocumentModel

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Principal:
    """Субъект запроса: пользователь (если вошел) и предъявленный токен ссылки"""

    user_id: Optional[uuid.UUID] = None
    share_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Principal()


def tokens_match(presented: Optional[str], stored: Optional[str]) -> bool:
    """Сравнение токенов за постоянное время; отсутствующий токен не совпадает ни с чем"""
    if not presented or not stored:
        return False
    return hmac.compare_digest(presented.encode(), stored.encode())


def ensure(allowed: bool, action: Action, resource: str) -> None:
    """Отказ неотличим от отсутствия строки"""
    if not allowed:
        logger.info(f"Access denied: {action.value} on {resource}")
        raise NotFoundOrForbidden()


class DocumentPolicy:
    """Правила для строк таблицы documents"""

    @staticmethod
    def is_owner(principal: Principal, document) -> bool:
        return principal.is_authenticated and document.owner_id == principal.user_id

    @staticmethod
    def can_create(principal: Principal, owner_id: uuid.UUID) -> bool:
        # Владелец вставляемой строки обязан совпадать с автором запроса
        return principal.is_authenticated and owner_id == principal.user_id

    @classmethod
    def can_read(cls, principal: Principal, document) -> bool:
        if cls.is_owner(principal, document):
            return True
        return tokens_match(principal.share_token, document.share_token)

    @classmethod
    def can_update(cls, principal: Principal, document) -> bool:
        return cls.is_owner(principal, document)

    @classmethod
    def can_delete(cls, principal: Principal, document) -> bool:
        return cls.is_owner(principal, document)

    @classmethod
    def check(cls, principal: Principal, action: Action, document) -> None:
        checks = {
            Action.READ: cls.can_read,
            Action.UPDATE: cls.can_update,
            Action.DELETE: cls.can_delete,
        }
        ensure(checks[action](principal, document), action, f"document {document.uuid}")

    @staticmethod
    def owner_clause(principal: Principal):
        if not principal.is_authenticated:
            return false()
        return DocumentModel.owner_id == principal.user_id

    @classmethod
    def read_clause(cls, principal: Principal):
        """SQL-условие видимости документа для субъекта"""
        conditions = []
        if principal.is_authenticated:
            conditions.append(DocumentModel.owner_id == principal.user_id)
        if principal.share_token:
            conditions.append(and_(
                DocumentModel.share_token.is_not(None),
                DocumentModel.share_token == principal.share_token
            ))
        if not conditions:
            return false()
        return or_(*conditions)


class StoragePolicy:
    """Правила для объектов хранилища.

    Проверка владельца на уровне объектов не выполняется: владение
    хранится только в таблице documents. Сервисы обращаются к хранилищу
    лишь после проверки DocumentPolicy, а файлы отдаются через
    кратковременные подписанные ссылки.
    """

    def __init__(self, bucket: str):
        self.bucket = bucket

    def can_create(self, principal: Principal, bucket: str) -> bool:
        return principal.is_authenticated and bucket == self.bucket

    def can_read(self, principal: Principal, bucket: str) -> bool:
        # Анонимное чтение нужно, чтобы ссылки открывались без входа
        return bucket == self.bucket

    def can_delete(self, principal: Principal, bucket: str) -> bool:
        return principal.is_authenticated and bucket == self.bucket

    def check(self, principal: Principal, action: Action, bucket: str) -> None:
        checks = {
            Action.CREATE: self.can_create,
            Action.READ: self.can_read,
            Action.DELETE: self.can_delete,
        }
        ensure(checks[action](principal, bucket), action, f"bucket {bucket}")


class CommentPolicy:
    """Правила для строк таблицы comments"""

    @staticmethod
    def can_create(principal: Principal, document, author_id: Optional[uuid.UUID]) -> bool:
        if principal.is_authenticated:
            author_ok = author_id == principal.user_id
        else:
            # Гость не может подписаться чужим именем
            author_ok = author_id is None
        return author_ok and DocumentPolicy.can_read(principal, document)

    @staticmethod
    def can_read(principal: Principal, document) -> bool:
        return DocumentPolicy.can_read(principal, document)

    @staticmethod
    def is_author(principal: Principal, comment) -> bool:
        # Гостевой комментарий не принадлежит никому
        return principal.is_authenticated and comment.author_id == principal.user_id

    @classmethod
    def can_update(cls, principal: Principal, document, comment) -> bool:
        return cls.is_author(principal, comment) and cls.can_read(principal, document)

    @classmethod
    def can_delete(cls, principal: Principal, document, comment) -> bool:
        return cls.is_author(principal, comment) and cls.can_read(principal, document)

    @staticmethod
    def author_clause(principal: Principal):
        """SQL-условие авторства комментария"""
        if not principal.is_authenticated:
            return false()
        return CommentModel.author_id == principal.user_id

    @classmethod
    def read_clause(cls, principal: Principal):
        """SQL-условие видимости комментария: родительский документ видим субъекту"""
        return exists(
            select(DocumentModel.uuid).where(
                DocumentModel.uuid == CommentModel.document_id,
                DocumentPolicy.read_clause(principal)
            )
        )
