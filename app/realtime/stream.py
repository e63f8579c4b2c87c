from typing import Any, Awaitable, Callable, Dict, Set
import logging
import uuid

from app.core.exceptions import NotFoundOrForbidden
from app.domains.access.policies import Principal
from app.domains.comments.schemas import CommentResponse
from app.domains.comments.services import CommentService
from app.realtime.feed import CommentFeed, SubscriptionClosed

logger = logging.getLogger(__name__)

SendJson = Callable[[Dict[str, Any]], Awaitable[None]]


class CommentStream:
    """Снимок комментариев документа и последующие вставки для одного зрителя.

    Подписка оформляется до чтения снимка, поэтому вставка между ними не
    теряется; повтор уже показанного комментария отбрасывается по uuid.
    Доступ перепроверяется на каждом событии: после отзыва ссылки гость
    перестает получать новые комментарии.
    """

    def __init__(
        self,
        send_json: SendJson,
        service: CommentService,
        feed: CommentFeed,
        document_id: uuid.UUID,
        principal: Principal
    ):
        self.send_json = send_json
        self.service = service
        self.feed = feed
        self.document_id = document_id
        self.principal = principal
        self.seen: Set[uuid.UUID] = set()

    async def run(self) -> bool:
        """Возвращает False, если доступ отсутствует или был отозван"""
        async with self.feed.subscribe(self.document_id) as subscription:
            try:
                snapshot = await self.service.list_comments(self.document_id, self.principal)
            except NotFoundOrForbidden:
                await self._send_denied()
                return False

            self.seen.update(comment.uuid for comment in snapshot)
            await self.send_json({
                "type": "snapshot",
                "data": [self._serialize(comment) for comment in snapshot]
            })

            while True:
                try:
                    comment = await subscription.get()
                except SubscriptionClosed:
                    return True

                if comment.uuid in self.seen:
                    continue
                self.seen.add(comment.uuid)

                try:
                    await self.service.get_readable_document(self.document_id, self.principal)
                except NotFoundOrForbidden:
                    logger.info(f"Stream access to document {self.document_id} withdrawn")
                    await self._send_denied()
                    return False

                await self.service.enrich([comment])
                await self.send_json({"type": "comment", "data": self._serialize(comment)})

    async def _send_denied(self) -> None:
        await self.send_json({"type": "error", "data": {"detail": NotFoundOrForbidden.detail}})

    @staticmethod
    def _serialize(comment) -> Dict[str, Any]:
        return CommentResponse.from_entity(comment).model_dump(mode="json")
