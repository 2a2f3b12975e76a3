import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from .api import analytics as analytics_api
from .api import applications as applications_api
from .api import auth as auth_api
from .api import jobs as jobs_api
from .api import pages as pages_api
from .api import profiles as profiles_api
from .config import FRONTEND_ORIGINS, LOG_LEVEL
from .database import init_db
from .utils.error_handlers import AppError, create_error_response, get_error_message

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("AppError on %s: %s", request.url.path, exc.message)
        return create_error_response(exc.status_code, exc.message, exc.details or None)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTPException with user-friendly messages."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status_code": exc.status_code,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(OperationalError)
    async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
        """Handle database operational errors."""
        logger.exception("Database OperationalError: %s", exc)
        return create_error_response(503, get_error_message("database_error"))

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle general database errors."""
        logger.exception("Database SQLAlchemyError: %s", exc)
        return create_error_response(500, get_error_message("database_error"))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle ValueError with user-friendly message."""
        logger.warning("ValueError: %s", exc)
        return create_error_response(400, str(exc) or get_error_message("validation_error"))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors globally."""
        logger.exception("Unhandled exception: %s", exc)
        return create_error_response(500, get_error_message("server_error"))


def create_app() -> FastAPI:
    app = FastAPI(title="Talent Portal")

    app.include_router(auth_api.router)
    app.include_router(pages_api.router)
    app.include_router(jobs_api.router)
    app.include_router(applications_api.router)
    app.include_router(profiles_api.router)
    app.include_router(analytics_api.router)

    register_exception_handlers(app)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "Backend running",
            "service": "Talent Portal"
        }

    _default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *FRONTEND_ORIGINS],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        configure_logging()
        init_db()
        logger.info("Database initialized")

    return app


app = create_app()
