from functools import lru_cache
import logging

from app.core.logging import mask_token

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Доставка писем пользователям.

    Почтовый транспорт не подключен: сообщения пишутся в лог. Замена
    выполняется через dependency_overrides для get_notifier.
    """

    def __init__(self):
        self.sent = []

    async def send_password_reset(self, email: str, reset_link: str, reset_token: str) -> None:
        """Письмо со ссылкой на сброс пароля"""
        self.sent.append({"kind": "password_reset", "to": email, "link": reset_link, "token": reset_token})
        logger.info(f"Password reset requested for {email} (token {mask_token(reset_token)})")

    async def send_share_invite(self, email: str, share_url: str, document_name: str) -> None:
        """Приглашение открыть документ по ссылке"""
        self.sent.append({"kind": "share_invite", "to": email, "link": share_url, "document": document_name})
        logger.info(f"Share invite for '{document_name}' sent to {email}")


@lru_cache
def get_notifier() -> LoggingNotifier:
    return LoggingNotifier()
