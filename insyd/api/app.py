"""FastAPI application factory."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import insyd
from insyd.config import AppConfig, EnvironmentConfig, load_config
from insyd.logging import get_logger
from insyd.logging.context import log_context
from insyd.notifications.dispatcher import EmailDispatcher
from insyd.notifications.smtp_client import SMTPClient
from insyd.persistence import PersistenceError, close_database, init_database
from insyd.scheduler import KeepaliveScheduler
from insyd.services import InsydError, InternalError, build_services

from .routes import router

logger = get_logger(__name__, component="api")


def create_app(
    app_config: Optional[AppConfig] = None,
    env_config: Optional[EnvironmentConfig] = None,
    smtp_client: Optional[SMTPClient] = None,
) -> FastAPI:
    """Build the application.

    The database, email dispatcher and keepalive scheduler are created when the
    application starts and released when it stops.

    Args:
        app_config: Application configuration (loaded from disk if None)
        env_config: Environment configuration (loaded from disk if None)
        smtp_client: SMTP client override, mainly for tests

    Returns:
        Configured FastAPI instance
    """
    if app_config is None or env_config is None:
        loaded_app_config, loaded_env_config = load_config()
        app_config = app_config or loaded_app_config
        env_config = env_config or loaded_env_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Insyd", extra={"event": "app.starting"})
        init_database(env_config.database_url)

        dispatcher = EmailDispatcher(env_config, app_config.email, smtp_client=smtp_client)
        if not dispatcher.enabled:
            logger.info(
                "Outbound email disabled (SMTP_HOST unset or email.enabled is false)",
                extra={"event": "email.disabled"},
            )
        app.state.dispatcher = dispatcher
        app.state.services = build_services(app_config, dispatcher)

        scheduler = None
        if app_config.maintenance.keepalive_enabled:
            scheduler = KeepaliveScheduler(app_config.maintenance.keepalive_interval_seconds)
            scheduler.start()
        app.state.scheduler = scheduler

        try:
            yield
        finally:
            logger.info("Shutting down...", extra={"event": "app.stopping"})
            if scheduler is not None:
                scheduler.shutdown(wait=False)
            dispatcher.shutdown(wait=True)
            close_database()

    app = FastAPI(
        title="Insyd",
        description="Notifications for the Insyd architecture community",
        version=insyd.__version__,
        lifespan=lifespan,
    )
    app.state.app_config = app_config
    app.state.env_config = env_config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()
        with log_context(request_id=request_id, method=request.method, path=request.url.path):
            response = await call_next(request)
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={
                    "event": "http.request.completed",
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)
    app.include_router(router)
    return app


def error_response(exc: InsydError) -> JSONResponse:
    """JSON error body for a service error; 500s also carry operator details."""
    content = {"error": exc.message}
    if isinstance(exc, InternalError) and exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Map service, persistence and validation errors to JSON error bodies."""

    @app.exception_handler(InsydError)
    async def handle_insyd_error(request: Request, exc: InsydError):
        return error_response(exc)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error(
            f"Store failure handling {request.method} {request.url.path}: {exc}",
            extra={"event": "http.store_error", "error_type": type(exc).__name__},
        )
        return error_response(InternalError("Internal server error", details=str(exc)))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(loc) for loc in first.get("loc", ()) if loc != "body")
            message = f"Invalid request: {field}: {first.get('msg')}" if field else "Invalid request body"
        else:
            message = "Invalid request body"
        return JSONResponse(status_code=400, content={"error": message})
