from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    password_reset_expire_minutes: int = 30

    # Хранилище файлов
    storage_backend: str = "local"
    storage_root: str = "./var/storage"
    storage_bucket: str = "pdfs"
    signed_url_ttl_seconds: int = 60
    max_upload_bytes: int = 20 * 1024 * 1024
    orphan_grace_seconds: int = 3600

    # Внешний адрес для ссылок общего доступа
    public_origin: str = "http://localhost:8000"
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    sql_echo: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v):
        if v not in ("local", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'local' or 'memory'")
        return v

    @field_validator("public_origin")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


settings = Settings()
