from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import asyncio
import logging
import uuid

from app.core.auth import principal_from_tokens
from app.core.db import get_db
from app.domains.comments.services import CommentService
from app.realtime.feed import CommentFeed, get_feed
from app.realtime.stream import CommentStream

logger = logging.getLogger(__name__)

router = APIRouter()


async def _receive_loop(websocket: WebSocket) -> None:
    """Чтение входящих сообщений: только ping; завершается при отключении"""
    while True:
        message = await websocket.receive_json()
        if isinstance(message, dict) and message.get("type") == "ping":
            await websocket.send_json({"type": "pong"})


@router.websocket("/ws/documents/{document_id}/comments")
async def comments_websocket(
    websocket: WebSocket,
    document_id: uuid.UUID,
    access_token: Optional[str] = Query(None),
    share_token: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    feed: CommentFeed = Depends(get_feed)
):
    """Поток комментариев документа: снимок, затем новые комментарии"""
    principal = await principal_from_tokens(db, access_token, share_token)
    if principal is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    logger.info(f"Comment stream opened for document {document_id}")

    stream = CommentStream(websocket.send_json, CommentService(db, feed), feed, document_id, principal)
    stream_task = asyncio.create_task(stream.run())
    receive_task = asyncio.create_task(_receive_loop(websocket))

    done, pending = await asyncio.wait({stream_task, receive_task}, return_when=asyncio.FIRST_COMPLETED)

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    error = receive_task.exception() if receive_task in done else None
    if error is not None and not isinstance(error, WebSocketDisconnect):
        logger.error(f"Comment stream receive error: {error}")

    if stream_task in done:
        error = stream_task.exception()
        if error is not None:
            logger.error(f"Comment stream error: {error}")
            code = status.WS_1011_INTERNAL_ERROR
        elif stream_task.result():
            # Подписка закрыта лентой (переполнение очереди): клиент может переподключиться
            code = status.WS_1013_TRY_AGAIN_LATER
        else:
            code = status.WS_1008_POLICY_VIOLATION
        try:
            await websocket.close(code=code)
        except RuntimeError:
            # Клиент уже отключился
            pass

    logger.info(f"Comment stream closed for document {document_id}")
