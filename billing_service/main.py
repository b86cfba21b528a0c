"""FastAPI Application Entry Point"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from billing_service.config import settings
from billing_service.database import Database
from billing_service.core.exceptions import BillingError, ValidationError
from billing_service.core.logging import setup_logging, get_logger
from billing_service.core.middleware import (
    CORRELATION_HEADER,
    CorrelationIdMiddleware,
    RequestTimingMiddleware,
    SecurityHeadersMiddleware,
    get_correlation_id,
)
from billing_service.schemas.responses import ErrorResponse, ErrorDetail
from billing_service.services.notification_service import NotificationService
from billing_service.api.v1.router import api_router
from billing_service.models.base import utc_now

# Setup logging
setup_logging()
logger = get_logger(__name__)


# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting application", extra={"environment": settings.ENVIRONMENT})
    app.state.database = Database.from_settings()
    app.state.notifier = NotificationService.from_settings()

    # Create tables for development only - use Alembic in production
    if settings.is_development or settings.DB_AUTO_CREATE:
        await app.state.database.create_all()
        logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await app.state.notifier.close()
    await app.state.database.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Billing service for medical appointments",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER, "X-Process-Time"],
)

# Custom middleware
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(CorrelationIdMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# Health check endpoints
@app.get("/health", tags=["Health"])
@limiter.exempt
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
@limiter.exempt
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


def error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    """Render the standard error envelope"""
    body = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            correlation_id=get_correlation_id(request),
            timestamp=utc_now(),
        )
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )


# Exception handlers
@app.exception_handler(BillingError)
async def billing_exception_handler(request: Request, exc: BillingError):
    """Handle domain errors"""
    if exc.status_code >= 500:
        logger.error(
            f"Billing failure: {exc.message}",
            extra={"path": request.url.path, "correlation_id": get_correlation_id(request)},
            exc_info=exc.cause or exc,
        )
        return error_response(request, exc.status_code, exc.code, "Internal server error")

    logger.warning(
        exc.message,
        extra={"path": request.url.path, "code": exc.code, "correlation_id": get_correlation_id(request)},
    )
    return error_response(request, exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors, reporting every violated field"""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))

    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "errors": messages,
            "correlation_id": get_correlation_id(request),
        }
    )
    error = ValidationError(", ".join(messages))
    return error_response(request, error.status_code, error.code, error.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown routes and other framework HTTP errors"""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(request, exc.status_code, "NOT_FOUND", "Route not found")
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return error_response(request, exc.status_code, "METHOD_NOT_ALLOWED", "Method not allowed")
    return error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit violations (called synchronously by SlowAPIMiddleware)"""
    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "correlation_id": get_correlation_id(request)},
    )
    return error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "RATE_LIMIT_EXCEEDED",
        "Too many requests from this IP, please try again later.",
    )


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "correlation_id": get_correlation_id(request),
        },
        exc_info=True
    )
    return error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "billing_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
