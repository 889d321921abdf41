import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


def _normalize_database_url(raw_url: str) -> str:
    cleaned = re.sub(r"\s+", "", (raw_url or "").strip())
    if cleaned.startswith("postgres://"):
        cleaned = "postgresql://" + cleaned[len("postgres://") :]
    return cleaned


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _split_origins(raw: str | None) -> list[str]:
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    database_url: str = "sqlite:///./tasksmith.db"
    database_ssl: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    update_retries: int = 3

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def load_settings() -> Settings:
    load_dotenv()

    return Settings(
        database_url=_normalize_database_url(
            os.getenv("DATABASE_URL", "sqlite:///./tasksmith.db")
        ),
        database_ssl=_flag(os.getenv("DATABASE_SSL")),
        pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
        update_retries=max(1, int(os.getenv("UPDATE_RETRIES", "3"))),
    )
