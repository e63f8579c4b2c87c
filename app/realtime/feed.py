"""Лента изменений комментариев внутри процесса.

Каждый подписчик получает собственную очередь. После отписки очередь
очищается и закрывается: события, опубликованные позже, не доставляются.
"""
from typing import Dict, Set, TYPE_CHECKING
import asyncio
import logging
import uuid

if TYPE_CHECKING:
    from app.domains.comments.entities import Comment

logger = logging.getLogger(__name__)


class SubscriptionClosed(Exception):
    """Подписка закрыта"""


class Subscription:
    """Подписка на новые комментарии одного документа"""

    def __init__(self, feed: "CommentFeed", document_id: uuid.UUID, maxsize: int = 256):
        self.feed = feed
        self.document_id = document_id
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def deliver(self, comment: "Comment") -> bool:
        if self.closed:
            return False
        try:
            self.queue.put_nowait(comment)
        except asyncio.QueueFull:
            logger.warning(f"Subscriber queue full for document {self.document_id}, closing subscription")
            self.close()
            return False
        return True

    async def get(self) -> "Comment":
        """Следующий комментарий; SubscriptionClosed после закрытия"""
        if self.closed:
            raise SubscriptionClosed()
        comment = await self.queue.get()
        if comment is None or self.closed:
            raise SubscriptionClosed()
        return comment

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.feed.unsubscribe(self)
        while not self.queue.empty():
            self.queue.get_nowait()
        # Будим ожидающего в get()
        self.queue.put_nowait(None)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class CommentFeed:
    """Рассылка вставленных комментариев подписчикам документа"""

    def __init__(self):
        self._subscribers: Dict[uuid.UUID, Set[Subscription]] = {}

    def subscribe(self, document_id: uuid.UUID) -> Subscription:
        subscription = Subscription(self, document_id)
        self._subscribers.setdefault(document_id, set()).add(subscription)
        logger.info(f"Subscribed to comments of document {document_id}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscribers.get(subscription.document_id)
        if not subscribers:
            return

        subscribers.discard(subscription)
        if not subscribers:
            del self._subscribers[subscription.document_id]
        logger.info(f"Unsubscribed from comments of document {subscription.document_id}")

    async def publish(self, comment: "Comment") -> int:
        """Доставка комментария подписчикам его документа; возвращает число получателей"""
        delivered = 0
        for subscription in list(self._subscribers.get(comment.document_id, ())):
            if subscription.deliver(comment):
                delivered += 1
        return delivered

    def subscriber_count(self, document_id: uuid.UUID) -> int:
        return len(self._subscribers.get(document_id, ()))


_feed = CommentFeed()


def get_feed() -> CommentFeed:
    return _feed
