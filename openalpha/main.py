"""
Open Alpha - K-12 tutoring platform

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from openalpha.ai.completion import CompletionService, build_completion_service
from openalpha.api.middleware.request_id import REQUEST_ID_HEADER, RequestIdMiddleware
from openalpha.api.v1 import router as api_v1_router
from openalpha.config import Settings, get_settings
from openalpha.database import Database
from openalpha.kernel.errors import AuthenticationError, TutorError
from openalpha.kernel.identity.jwt import JWTManager
from openalpha.logging_config import configure_logging, get_logger
from openalpha.pedagogy.catalog import CurriculumCatalog, load_default_catalog
from openalpha.schemas.common import HealthResponse

logger = get_logger(__name__)


def _error_response(request: Request, status_code: int, content: dict, headers: Optional[dict] = None) -> JSONResponse:
    headers = dict(headers or {})
    req_id = getattr(request.state, "request_id", None)
    if req_id:
        headers[REQUEST_ID_HEADER] = req_id
        content["request_id"] = req_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TutorError)
    async def tutor_error_handler(request: Request, exc: TutorError):
        """Domain errors carry their own status and kind."""
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        if exc.retryable:
            logger.warning(
                "Dependency failure",
                extra={"path": request.url.path, "code": exc.code, "detail": exc.detail},
            )
        return _error_response(request, exc.status_code, exc.to_dict(), headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })
        content = {
            "detail": "Validation error",
            "kind": "validation_failed",
            "retryable": False,
            "errors": errors,
        }
        return _error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Anything unexpected is logged with its traceback and reported opaquely."""
        logger.exception("Unhandled exception: %s", exc)
        content = {
            "detail": "Internal server error",
            "kind": "internal_failure",
            "retryable": False,
        }
        return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, content)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    completion: Optional[CompletionService] = None,
    catalog: Optional[CurriculumCatalog] = None,
) -> FastAPI:
    """
    Build the application.

    Every collaborator can be injected; anything not supplied is built from
    settings. The curriculum is validated here, so a broken catalog stops
    startup instead of failing a request later.
    """
    settings = settings or get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    database = database or Database(settings.database_url, echo=settings.debug)
    catalog = catalog or load_default_catalog()
    completion = completion or build_completion_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        logger.info("Starting %s v%s", settings.project_name, settings.version)
        await database.create_all()

        yield

        logger.info("Shutting down...")
        await database.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title=settings.project_name,
        description="""
    Open Alpha - AI-guided K-12 learning

    ## Features

    - **Curriculum**: Math, reading and science concepts with prerequisites
    - **Tutor**: Concept-scoped chat and generated quizzes for students
    - **Mastery**: Best-score tracking with an 80% completion threshold
    - **Parents**: Invite-code linking, child dashboards and an AI coach
    """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.jwt_manager = JWTManager.from_settings(settings)
    app.state.completion = completion
    app.state.catalog = catalog

    # Last added = outermost, so CORS wraps error responses too
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        db_ok = await database.ping()
        return HealthResponse(
            status="ok" if db_ok else "degraded",
            version=settings.version,
            database="connected" if db_ok else "unavailable",
            llm=getattr(completion, "model_name", "unknown"),
        )

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "api": {
                "v1": settings.api_v1_prefix,
            },
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)
    return app


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "openalpha.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
