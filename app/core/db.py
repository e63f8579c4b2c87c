from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings

# Базовый класс для моделей
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Создание асинхронного движка с учетом особенностей SQLite"""
    engine_kwargs = {"echo": echo, "future": True}

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        # Без этого SQLite не выполняет ON DELETE CASCADE
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# Асинхронный движок
engine = build_engine(settings.database_url, echo=settings.sql_echo)

# Сессии
SessionLocal = build_session_factory(engine)


# Функция для dependency injection в FastAPI
async def get_db():
    async with SessionLocal() as session:
        yield session


async def create_all(bind: AsyncEngine = None) -> None:
    """Создание всех таблиц (локальный запуск и тесты)"""
    import app.db.models  # noqa: F401  регистрация моделей в metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
