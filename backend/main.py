import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import Settings, load_settings
from core.errors import TasksmithError, ValidationError
from db.base import Base
from db.session import build_engine, build_session_factory
from models import entities as _entity_models  # noqa: F401  (registers the entities table)
from routers.entities import router as entities_router
from routers.schemas import router as schemas_router

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TasksmithError)
    def _tasksmith_error(request: Request, exc: TasksmithError):
        if isinstance(exc, ValidationError):
            return _error(exc.status_code, exc.message, details=exc.errors)
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    def _http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    def _request_error(request: Request, exc: RequestValidationError):
        details = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return _error(400, "Invalid request", details=details)

    @app.exception_handler(SQLAlchemyError)
    def _storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("%s %s: database error", request.method, request.url.path)
        return _error(500, str(exc))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    engine = build_engine(settings)

    # --------------------------------------------------
    # APP
    # --------------------------------------------------
    app = FastAPI(
        title="Tasksmith API",
        version="1.0.0",
        swagger_ui_parameters={"displayRequestDuration": True},
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # --------------------------------------------------
    # DB INIT / SHUTDOWN
    # --------------------------------------------------
    @app.on_event("startup")
    def _init_db():
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError:
            logger.exception("DB init failed")

    @app.on_event("shutdown")
    def _close_db():
        engine.dispose()
        logger.info("Database pool closed")

    # --------------------------------------------------
    # CORS
    # --------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # --------------------------------------------------
    # ROUTERS
    # --------------------------------------------------
    app.include_router(entities_router)
    app.include_router(schemas_router)

    # --------------------------------------------------
    # HEALTH CHECK
    # --------------------------------------------------
    @app.get("/api/health")
    def health():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Health check failed: %s", exc)
            return JSONResponse(status_code=500, content={"status": "error", "message": str(exc)})
        return {"status": "ok"}

    @app.get("/api/db-test")
    def db_test():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
        return {
            "success": True,
            "message": "Database connected",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    logger.info("Tasksmith API on http://%s:%s/api", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
