import logging
from logging.config import dictConfig

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    """Настройка логирования приложения (вызывается один раз при старте)"""
    level = (level or settings.log_level).upper()

    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "level": level,
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            # uvicorn.access дублирует информацию о запросах
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "INFO" if settings.sql_echo else "WARNING"},
        },
    })

    logging.getLogger(__name__).debug(f"Logging configured at level {level}")


def mask_token(token: str) -> str:
    """Сокращение секрета для вывода в лог"""
    if not token:
        return "<none>"
    return f"{token[:4]}…"
