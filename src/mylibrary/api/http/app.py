"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from src.mylibrary import __version__
from src.mylibrary.api.http.app_data import ApplicationDependencies
from src.mylibrary.api.http.envelope import (
    domain_error_response,
    error_response,
    internal_error_response,
)
from src.mylibrary.api.http.routers import auth, books, health
from src.mylibrary.api.utils.app_startup import configure_logging
from src.mylibrary.core.errors import (
    AuthenticationError,
    ConfigurationError,
    MyLibraryError,
    ValidationFailed,
    field_errors,
)
from src.mylibrary.core.services import CredentialService, DbSessionService
from src.mylibrary.runtime.config.config_data import ConfigData
from src.mylibrary.runtime.context import get_config

API_PREFIX = "/api"


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, production: bool = False):
        super().__init__(app)
        self._production = production

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if self._production:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response


# --- Lifecycle ---
def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Construct the process-wide collaborators.

    Raises:
        ConfigurationError: If the signing secret is missing or the database
            cannot be reached. Both are fatal at startup.
    """
    credential_service = CredentialService(config.auth)

    database_service = DbSessionService(config)
    if not database_service.health_check():
        database_service.dispose()
        raise ConfigurationError("Database is unreachable")
    database_service.create_all()

    return ApplicationDependencies(
        config=config,
        database_service=database_service,
        credential_service=credential_service,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: ConfigData = app.state.config
    logger.info("Starting up application in {} environment", config.app.environment)
    try:
        deps = build_dependencies(config)
    except ConfigurationError as exc:
        logger.critical("Startup aborted: {}", exc.message)
        raise
    app.state.app_dependencies = deps
    try:
        yield
    finally:
        logger.info("Shutting down application")
        deps.database_service.dispose()


# --- Exception handlers ---
def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MyLibraryError)
    async def handle_domain_error(request: Request, exc: MyLibraryError):
        if isinstance(exc, AuthenticationError):
            # Precise reason stays in the logs only
            logger.bind(reason=exc.message).info("auth.rejected")
        elif isinstance(exc, ValidationFailed):
            logger.bind(fields=[e.field for e in exc.errors]).info("request.invalid")
        else:
            logger.bind(kind=str(exc.kind)).info("request.failed: {}", exc.message)
        return domain_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return domain_error_response(ValidationFailed(field_errors(exc.errors())))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return error_response(exc.status_code, message, headers=exc.headers)


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the application for ``config`` (the loaded configuration by default)."""
    config = config or get_config()
    configure_logging(config)

    production = config.app.environment == "production"
    app = FastAPI(
        title="MyLibrary",
        version=__version__,
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    app.state.config = config

    app.add_middleware(SecurityHeadersMiddleware, production=production)

    # --- CORS configuration ---
    cors = config.app.cors
    if production and "*" in cors.origins and cors.allow_credentials:
        raise ConfigurationError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )

    # --- Request logging middleware ---
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        xff = request.headers.get("x-forwarded-for")
        client_ip = (
            xff.split(",")[0].strip()
            if xff
            else request.client.host
            if request.client
            else "unknown"
        )

        # query strings are left out; search terms are user data
        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip,
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)

                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

                response.headers.setdefault("X-Request-ID", request_id)
                return response

            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                return internal_error_response(
                    exc,
                    expose_detail=not production,
                    headers={"X-Request-ID": request_id},
                )

    _register_exception_handlers(app)

    # --- Router registration ---
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(books.router, prefix=API_PREFIX)
    app.include_router(health.router, prefix=API_PREFIX)

    @app.get("/", include_in_schema=False)
    async def index() -> dict:
        return {
            "success": True,
            "message": "MyLibrary API",
            "data": {
                "version": __version__,
                "endpoints": {
                    "auth": f"{API_PREFIX}/auth",
                    "books": f"{API_PREFIX}/books",
                    "health": f"{API_PREFIX}/health",
                },
            },
        }

    return app


app = create_app()

# expose the factory for tests
__all__ = ["app", "create_app", "build_dependencies"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
