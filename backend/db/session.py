import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import Settings

logger = logging.getLogger(__name__)


def _needs_ssl(url: str) -> bool:
    return ".rds.amazonaws.com" in url or ".aws.neon.tech" in url


def _is_memory_sqlite(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in url


def build_engine(settings: Settings) -> Engine:
    url = settings.database_url
    engine_kwargs: dict = {
        "pool_pre_ping": True,
    }

    if settings.is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": settings.pool_recycle,
                "pool_size": settings.pool_size,
                "max_overflow": settings.max_overflow,
            }
        )

        if (settings.database_ssl or _needs_ssl(url)) and "sslmode=" not in url:
            engine_kwargs["connect_args"] = {"sslmode": "require"}

    elif settings.is_sqlite:
        # requests run on the threadpool, not the thread that opened the connection
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(url):
            engine_kwargs["poolclass"] = StaticPool

    logger.info("DB: dialect=%s", url.split(":", 1)[0])
    return create_engine(url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
