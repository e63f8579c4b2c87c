"""
Tests for the in-process comment feed, the per-viewer stream and the
WebSocket endpoint (driven with AsyncMock fakes).
"""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest
from fastapi import WebSocketDisconnect, status

from app.api.ws.comments import comments_websocket
from app.db.repositories.comment_repository import CommentRepository
from app.domains.access.policies import Principal
from app.domains.comments.entities import Comment
from app.domains.comments.services import CommentService
from app.domains.documents.services import DocumentService
from app.domains.identity.schemas import UserCreate, UserLogin
from app.domains.identity.services import IdentityService
from app.domains.sharing.services import SharingService
from app.realtime.feed import CommentFeed, SubscriptionClosed
from app.realtime.stream import CommentStream
from conftest import PASSWORD, PDF_BYTES


async def _owner_and_document(session, storage):
    user, _ = await IdentityService(session).register_user(
        UserCreate(email="owner@example.com", password=PASSWORD, display_name="Olga")
    )
    owner = Principal(user_id=user.uuid)
    document = await DocumentService(session, storage).upload_document(
        owner, "report.pdf", "application/pdf", PDF_BYTES
    )
    return owner, document


async def _wait_for(mock: AsyncMock, count: int):
    for _ in range(200):
        if mock.await_count >= count:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"expected {count} calls, got {mock.await_count}")


def _sent(mock: AsyncMock, index: int) -> dict:
    return mock.await_args_list[index].args[0]


def _uuid(n: int) -> uuid.UUID:
    return uuid.UUID(int=n)


# =============================================================================
# FEED
# =============================================================================


@pytest.mark.asyncio
async def test_publish_reaches_only_subscribers_of_that_document():
    feed = CommentFeed()
    comment = Comment.create_comment(document_id=_uuid(1), body="a")
    subscription = feed.subscribe(comment.document_id)
    other = feed.subscribe(_uuid(2))

    delivered = await feed.publish(comment)

    assert delivered == 1
    assert await subscription.get() is comment
    assert other.queue.empty()


@pytest.mark.asyncio
async def test_no_delivery_after_unsubscribe():
    feed = CommentFeed()
    comment = Comment.create_comment(document_id=_uuid(1), body="x")
    subscription = feed.subscribe(comment.document_id)

    await feed.publish(comment)
    subscription.close()

    assert feed.subscriber_count(comment.document_id) == 0
    assert await feed.publish(comment) == 0
    with pytest.raises(SubscriptionClosed):
        await subscription.get()


@pytest.mark.asyncio
async def test_close_wakes_pending_reader():
    feed = CommentFeed()
    subscription = feed.subscribe(_uuid(1))

    reader = asyncio.create_task(subscription.get())
    await asyncio.sleep(0)
    subscription.close()

    with pytest.raises(SubscriptionClosed):
        await reader


@pytest.mark.asyncio
async def test_slow_subscriber_is_dropped_when_queue_overflows():
    feed = CommentFeed()
    document_id = _uuid(1)
    subscription = feed.subscribe(document_id)
    subscription.queue = asyncio.Queue(maxsize=1)

    await feed.publish(Comment.create_comment(document_id=document_id, body="1"))
    await feed.publish(Comment.create_comment(document_id=document_id, body="2"))

    assert subscription.closed
    assert feed.subscriber_count(document_id) == 0


@pytest.mark.asyncio
async def test_guest_comment_delivered_to_concurrent_subscribers(session, storage):
    owner, document = await _owner_and_document(session, storage)
    shared = await SharingService(session).share_document(document.uuid, owner)
    feed = CommentFeed()
    first = feed.subscribe(document.uuid)
    second = feed.subscribe(document.uuid)

    guest = Principal(share_token=shared.share_token)
    created = await CommentService(session, feed).add_comment(document.uuid, guest, "**hello**")

    assert created.body == "<strong>hello</strong>"
    assert created.author_id is None
    assert created.author_name == "Guest"
    for subscription in (first, second):
        received = await subscription.get()
        assert received.uuid == created.uuid


# =============================================================================
# STREAM
# =============================================================================


@pytest.mark.asyncio
async def test_stream_sends_snapshot_then_new_comments_without_duplicates(session, storage):
    owner, document = await _owner_and_document(session, storage)
    feed = CommentFeed()
    existing = await CommentService(session).add_comment(document.uuid, owner, "first")

    send_json = AsyncMock()
    stream = CommentStream(send_json, CommentService(session, feed), feed, document.uuid, owner)
    task = asyncio.create_task(stream.run())
    await _wait_for(send_json, 1)

    snapshot = _sent(send_json, 0)
    assert snapshot["type"] == "snapshot"
    assert [c["uuid"] for c in snapshot["data"]] == [str(existing.uuid)]

    # Replayed snapshot event is dropped
    await feed.publish(existing)
    new = await CommentRepository(session).create(
        Comment.create_comment(document_id=document.uuid, body="second", author_id=owner.user_id)
    )
    await feed.publish(new)
    await _wait_for(send_json, 2)

    event = _sent(send_json, 1)
    assert event["type"] == "comment"
    assert event["data"]["uuid"] == str(new.uuid)
    assert event["data"]["author_name"] == "Olga"
    assert send_json.await_count == 2

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert feed.subscriber_count(document.uuid) == 0


@pytest.mark.asyncio
async def test_stream_denies_viewer_without_access(session, storage):
    _, document = await _owner_and_document(session, storage)
    feed = CommentFeed()
    send_json = AsyncMock()

    stream = CommentStream(send_json, CommentService(session, feed), feed, document.uuid, Principal())
    allowed = await stream.run()

    assert allowed is False
    assert _sent(send_json, 0) == {"type": "error", "data": {"detail": "Not found"}}
    assert feed.subscriber_count(document.uuid) == 0


@pytest.mark.asyncio
async def test_stream_stops_after_link_revoked(session, storage):
    owner, document = await _owner_and_document(session, storage)
    shared = await SharingService(session).share_document(document.uuid, owner)
    feed = CommentFeed()
    guest = Principal(share_token=shared.share_token)

    send_json = AsyncMock()
    stream = CommentStream(send_json, CommentService(session, feed), feed, document.uuid, guest)
    task = asyncio.create_task(stream.run())
    await _wait_for(send_json, 1)

    await SharingService(session).revoke_share_token(document.uuid, owner)
    late = await CommentRepository(session).create(
        Comment.create_comment(document_id=document.uuid, body="after revoke", author_id=owner.user_id)
    )
    await feed.publish(late)

    assert await asyncio.wait_for(task, timeout=2) is False
    assert _sent(send_json, 1)["type"] == "error"


# =============================================================================
# WEBSOCKET ENDPOINT
# =============================================================================


def _fake_websocket(disconnect: asyncio.Event) -> AsyncMock:
    websocket = AsyncMock()

    async def receive_json():
        await disconnect.wait()
        raise WebSocketDisconnect(code=1000)

    websocket.receive_json.side_effect = receive_json
    return websocket


@pytest.mark.asyncio
async def test_websocket_streams_until_client_disconnects(session, storage):
    owner, document = await _owner_and_document(session, storage)
    token = await IdentityService(session).login_user(UserLogin(email="owner@example.com", password=PASSWORD))
    feed = CommentFeed()
    disconnect = asyncio.Event()
    websocket = _fake_websocket(disconnect)

    task = asyncio.create_task(
        comments_websocket(websocket, document.uuid, access_token=token, share_token=None, db=session, feed=feed)
    )
    await _wait_for(websocket.send_json, 1)
    assert _sent(websocket.send_json, 0) == {"type": "snapshot", "data": []}
    assert feed.subscriber_count(document.uuid) == 1

    disconnect.set()
    await asyncio.wait_for(task, timeout=2)

    websocket.accept.assert_awaited_once()
    websocket.close.assert_not_awaited()
    assert feed.subscriber_count(document.uuid) == 0


@pytest.mark.asyncio
async def test_websocket_rejects_invalid_access_token(session, storage):
    _, document = await _owner_and_document(session, storage)
    websocket = _fake_websocket(asyncio.Event())

    await comments_websocket(
        websocket, document.uuid, access_token="garbage", share_token=None, db=session, feed=CommentFeed()
    )

    websocket.accept.assert_not_awaited()
    websocket.close.assert_awaited_once_with(code=status.WS_1008_POLICY_VIOLATION)


@pytest.mark.asyncio
async def test_websocket_closes_for_unauthorized_viewer(session, storage):
    _, document = await _owner_and_document(session, storage)
    websocket = _fake_websocket(asyncio.Event())

    await asyncio.wait_for(
        comments_websocket(
            websocket, document.uuid, access_token=None, share_token="wrong", db=session, feed=CommentFeed()
        ),
        timeout=2,
    )

    assert _sent(websocket.send_json, 0)["type"] == "error"
    websocket.close.assert_awaited_once_with(code=status.WS_1008_POLICY_VIOLATION)


@pytest.mark.asyncio
async def test_websocket_overflow_asks_client_to_reconnect(session, storage):
    owner, document = await _owner_and_document(session, storage)
    token = await IdentityService(session).login_user(UserLogin(email="owner@example.com", password=PASSWORD))
    feed = CommentFeed()
    websocket = _fake_websocket(asyncio.Event())

    task = asyncio.create_task(
        comments_websocket(websocket, document.uuid, access_token=token, share_token=None, db=session, feed=feed)
    )
    await _wait_for(websocket.send_json, 1)

    # No await point inside publish, so the reader never drains the queue
    for n in range(300):
        await feed.publish(Comment.create_comment(document.uuid, f"c{n}", author_id=owner.user_id))

    await asyncio.wait_for(task, timeout=2)

    websocket.close.assert_awaited_once_with(code=status.WS_1013_TRY_AGAIN_LATER)
    assert feed.subscriber_count(document.uuid) == 0
