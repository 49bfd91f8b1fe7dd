import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from . import database
from .api import admin as admin_api
from .api import auth as auth_api
from .api import docket as docket_api
from .config import FRONTEND_ORIGINS, LOG_LEVEL
from .services.admin_service import bootstrap_admin_from_env
from .utils.error_handlers import (
    AppError,
    app_error_response,
    create_error_response,
    get_error_message,
    http_error_code,
)

logger = logging.getLogger(__name__)


def include_routers(app: FastAPI) -> None:
    app.include_router(auth_api.router)
    app.include_router(docket_api.router)
    app.include_router(admin_api.router)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Domain errors carry their own status and code."""
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return app_error_response(exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTPException with user-friendly messages."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "code": http_error_code(exc),
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"), code="SERVICE_UNAVAILABLE")

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"), code="SERVICE_UNAVAILABLE")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"), code="SERVER_ERROR")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Docket Portal")
    include_routers(app)
    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "Backend running",
            "service": "Docket Portal"
        }

    @app.get("/db/health")
    def db_health():
        if getattr(app.state, "db_init_error", None):
            raise HTTPException(
                status_code=503,
                detail=f"DB init failed: {app.state.db_init_error}",
            )

        try:
            with database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise HTTPException(
                status_code=503,
                detail=f"DB connection failed: {e}",
            )

        return {"status": "ok"}

    @app.on_event("startup")
    def on_startup() -> None:
        try:
            database.init_db()
            db = database.SessionLocal()
            try:
                bootstrap_admin_from_env(db)
            finally:
                db.close()
            app.state.db_init_error = None
        except SQLAlchemyError as e:
            logger.exception("Database initialisation failed")
            app.state.db_init_error = str(e)

    _default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *FRONTEND_ORIGINS],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
