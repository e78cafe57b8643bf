"""StudyNotion Payments API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studynotion.auth.service import UserService
from studynotion.config import get_settings
from studynotion.core.context import get_request_id
from studynotion.core.database import init_async_cassandra, shutdown_async_cassandra
from studynotion.core.logging import configure_structlog, get_logger
from studynotion.core.middleware import RequestContextMiddleware
from studynotion.courses.service import CourseService
from studynotion.email.service import EmailService
from studynotion.health import router as health_router
from studynotion.payments.dependencies import set_payment_service_getter
from studynotion.payments.router import router as payments_router
from studynotion.payments.service import PaymentService
from studynotion.progress.service import ProgressService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    course_service: CourseService | None = None
    user_service: UserService | None = None
    progress_service: ProgressService | None = None
    email_service: EmailService | None = None
    payment_service: PaymentService | None = None


app_state = AppState()


def get_payment_service() -> PaymentService:
    """Get PaymentService instance from app state."""
    if app_state.payment_service is None:
        msg = "PaymentService not initialized"
        raise RuntimeError(msg)
    return app_state.payment_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Email is optional; enrollment still works without it
    if settings.email_configured:
        try:
            app_state.email_service = EmailService(
                credentials_path=settings.email_credentials_path,
                sender_address=settings.email_sender_address,
                sender_name=settings.email_sender_name,
            )
            logger.info(
                "email_service_initialized",
                sender=settings.email_sender_address,
            )
        except Exception as e:
            logger.warning(
                "email_service_init_skipped",
                error=str(e),
                message="Running without email service",
            )

    try:
        app_state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        app_state.course_service = CourseService(
            session=app_state.cassandra_session,
            keyspace=settings.cassandra_keyspace,
        )
        app_state.user_service = UserService(
            session=app_state.cassandra_session,
            keyspace=settings.cassandra_keyspace,
        )
        app_state.progress_service = ProgressService(
            session=app_state.cassandra_session,
            keyspace=settings.cassandra_keyspace,
        )
        logger.info("data_services_initialized")

        app_state.payment_service = PaymentService(
            course_service=app_state.course_service,
            user_service=app_state.user_service,
            progress_service=app_state.progress_service,
            email_service=app_state.email_service,
            settings=settings,
        )
        logger.info(
            "payment_service_initialized",
            email_enabled=app_state.email_service is not None,
        )
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps Starlette from rendering tracebacks in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="StudyNotion - Payments and Enrollment API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "success": False,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": request_id,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle request validation errors (e.g. malformed course IDs)."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "success": False,
                "message": "Validation error",
                "status_code": 422,
                "request_id": request_id,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Details are logged, never returned.
        """
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "success": False,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": request_id,
            },
        )

    app.include_router(health_router)
    app.include_router(payments_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "StudyNotion Payments API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


set_payment_service_getter(get_payment_service)


app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the api_* settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "studynotion.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        reload=settings.api_reload and settings.is_development,
        # Logging is configured by configure_structlog
        log_config=None,
    )


if __name__ == "__main__":
    run()
