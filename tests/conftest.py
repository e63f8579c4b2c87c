"""
Shared fixtures for PDFShare tests.

Every test gets its own in-memory SQLite database, in-memory storage,
notifier and comment feed, wired into the app via dependency_overrides.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("MAX_UPLOAD_BYTES", "4096")
os.environ.setdefault("PUBLIC_ORIGIN", "http://testserver")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.db import build_engine, build_session_factory, create_all, get_db
from app.core.notifications import LoggingNotifier, get_notifier
from app.main import app as fastapi_app
from app.realtime.feed import CommentFeed, get_feed
from app.storage import MemoryStorageBackend, get_storage

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"
PASSWORD = "Secret123"


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_all(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return MemoryStorageBackend("pdfs")


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def feed():
    return CommentFeed()


@pytest.fixture
def app(session_factory, storage, notifier, feed):
    async def _get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    fastapi_app.dependency_overrides[get_feed] = lambda: feed
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


async def register_and_login(client: AsyncClient, email: str, display_name: str = "Alice") -> dict:
    """Register a user and return Authorization headers for them."""
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": PASSWORD, "display_name": display_name},
    )
    assert response.status_code == 201, response.text

    response = await client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def upload_pdf(client: AsyncClient, headers: dict, filename: str = "report.pdf", data: bytes = PDF_BYTES):
    return await client.post(
        "/documents",
        headers=headers,
        files={"file": (filename, data, "application/pdf")},
    )


@pytest_asyncio.fixture
async def owner_headers(client):
    return await register_and_login(client, "owner@example.com", "Olga")


@pytest_asyncio.fixture
async def other_headers(client):
    return await register_and_login(client, "other@example.com", "Boris")


@pytest_asyncio.fixture
async def document(client, owner_headers):
    response = await upload_pdf(client, owner_headers)
    assert response.status_code == 201, response.text
    return response.json()
