"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .api.errors import DOMAIN_ERROR_STATUS, APIError
from .api.routers import chat_session, doctors, health, medical_report, user_stats, voice_chat
from .api.utils.responses import fail, ok
from .core.config import get_settings
from .core.structured_logger import configure_logging
from .domain.errors import DomainError
from .middleware.auth_middleware import AuthenticationMiddleware
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware

logger = logging.getLogger("medivoice")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.logging)
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"📊 Environment: {settings.app_env}")

    from beanie import init_beanie
    from motor.motor_asyncio import AsyncIOMotorClient
    import certifi

    from .adapters.db.mongo.models.consultation_m import ConsultationSessionMongo

    mongo_uri = settings.database.uri
    timeout_ms = settings.database.server_selection_timeout_ms

    # Enable TLS only for Atlas SRV URIs
    if mongo_uri.startswith("mongodb+srv://"):
        client = AsyncIOMotorClient(
            mongo_uri,
            serverSelectionTimeoutMS=timeout_ms,
            tls=True,
            tlsCAFile=certifi.where(),
            tlsAllowInvalidCertificates=False,
        )
    else:
        client = AsyncIOMotorClient(mongo_uri, serverSelectionTimeoutMS=timeout_ms)

    try:
        await init_beanie(
            database=client[settings.database.db_name],
            document_models=[ConsultationSessionMongo],
        )
    except Exception as e:
        logger.error(f"❌ Database connection failed: {type(e).__name__}: {e}", exc_info=True)
        raise
    logger.info("✅ Database connection established")

    if not settings.azure_openai.is_configured:
        logger.warning(
            "⚠️  Azure OpenAI is not configured; consultation turns will use the fallback reply "
            "and report generation will fail. Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
        )

    logger.info("✅ Application startup completed successfully")

    yield

    logger.info(f"🛑 Shutting down {settings.app_name}")
    client.close()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="MediVoice Consultation API",
        description="Multi-language voice consultations with AI doctor personas",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Starlette runs the last added middleware first
    app.add_middleware(AuthenticationMiddleware)
    app.add_middleware(PerformanceMiddleware)
    app.add_middleware(RequestIDMiddleware)

    allow_headers = list(settings.cors.allowed_headers or ["*"])
    if allow_headers != ["*"]:
        for header in ("content-type", "authorization", "x-api-key", "x-request-id"):
            if header not in {h.lower() for h in allow_headers}:
                allow_headers.append(header)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=allow_headers,
        expose_headers=["X-Request-ID", "X-Process-Time"],
        max_age=600,
    )

    app.include_router(health.router)
    app.include_router(voice_chat.router)
    app.include_router(chat_session.router)
    app.include_router(medical_report.router)
    app.include_router(user_stats.router)
    app.include_router(doctors.router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request):
        return ok(
            request,
            data={
                "service": settings.app_name,
                "version": settings.app_version,
                "docs": "/docs",
                "health": "/health",
            },
            message="MediVoice consultation API",
        )

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = DOMAIN_ERROR_STATUS.get(exc.error_code, 400)
        log = logger.error if status_code >= 500 else logger.warning
        log(f"DomainError: {exc.error_code} ({status_code}) {exc.message} | path={request.url.path}")
        return JSONResponse(
            status_code=status_code,
            content=fail(request, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details).model_dump(),
        )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        logger.warning(f"APIError: {exc.code} ({exc.http_status}) {exc.message} | path={request.url.path}")
        return JSONResponse(
            status_code=exc.http_status,
            content=fail(request, exc.code, exc.message, exc.details).model_dump(),
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        code = "UNAUTHORIZED" if exc.status_code == 401 else "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(request, code, str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        messages = [
            f"{' -> '.join(str(x) for x in error.get('loc', []))}: {error.get('msg', 'Validation error')}"
            for error in errors
        ]
        logger.warning(f"ValidationError on {request.method} {request.url.path}: {messages}")
        return JSONResponse(
            status_code=422,
            content=fail(
                request,
                "INVALID_INPUT",
                f"Input validation failed: {'; '.join(messages)}",
                {"errors": [{"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors]},
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=fail(request, "INTERNAL_ERROR", "An unexpected error occurred").model_dump(),
        )

    return app


app = create_app()
