from typing import Optional
import asyncio

import typer

from app.core.db import SessionLocal, create_all
from app.core.logging import setup_logging
from app.domains.documents.services import DocumentService
from app.storage import get_storage

app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.command("init-db")
def init_db():
    """Создание таблиц по моделям (локальный SQLite; для PostgreSQL используйте alembic)"""
    setup_logging()
    asyncio.run(create_all())
    typer.echo("Database schema created")


async def _reconcile(grace_seconds: Optional[int], dry_run: bool):
    """Сверка хранилища с таблицей documents"""
    async with SessionLocal() as session:
        return await DocumentService(session, get_storage()).reconcile_storage(grace_seconds, dry_run)


@app.command("reconcile-storage")
def reconcile_storage(
        grace_seconds: Optional[int] = typer.Option(None, help="Пропускать объекты моложе N секунд; по умолчанию ORPHAN_GRACE_SECONDS"),
        dry_run: bool = typer.Option(False, "--dry-run", help="Только вывести список объектов без записей"),
):
    """Удаление сохраненных PDF, на которые не ссылается ни один документ"""
    setup_logging()
    orphans = asyncio.run(_reconcile(grace_seconds, dry_run))

    for key in orphans:
        typer.echo(key)
    verb = "Found" if dry_run else "Removed"
    typer.echo(f"{verb} {len(orphans)} orphaned object(s)")


if __name__ == "__main__":
    app()
