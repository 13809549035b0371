from contextlib import asynccontextmanager
from typing import Dict, List

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import EVotingError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import api_router

API_PREFIX = f"/api/{settings.API_VERSION}"

# Allowance for multipart boundaries and form fields around an uploaded file
MULTIPART_OVERHEAD = 1024 * 1024


def upload_limits() -> Dict[str, int]:
    """Request body ceilings for the multipart endpoints"""
    image_limit = settings.MAX_FACE_IMAGE_SIZE + MULTIPART_OVERHEAD
    return {
        f"{API_PREFIX}/student/upload-document": settings.MAX_DOCUMENT_SIZE + MULTIPART_OVERHEAD,
        f"{API_PREFIX}/student/verify-face": image_limit,
        f"{API_PREFIX}/admin/candidates": image_limit,
    }


def check_configuration() -> List[str]:
    """
    Return configuration problems that make the service unusable.

    Collaborators that are only needed by one verification step are
    reported as warnings instead.
    """
    errors = []
    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        errors.append("JWT_SECRET_KEY is not set or using default value")

    if not settings.GOOGLE_CLIENT_ID:
        logger.warning("[Startup] GOOGLE_CLIENT_ID not set - every Google sign-in will be rejected")
    if not settings.BIOMETRIC_API_KEY or not settings.BIOMETRIC_API_SECRET:
        logger.warning("[Startup] Biometric API credentials not set - face verification will fail")
    if not settings.USE_MINIO and not settings.AWS_ACCESS_KEY_ID:
        logger.info("[Startup] No S3 keys configured - storage falls back to IAM role credentials")
    return errors


async def ensure_database_ready() -> bool:
    """Create tables and the bootstrap administrator"""
    from app.db.seed_data import seed_admin

    try:
        await init_db()
        await seed_admin()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"[Startup] Database not ready: {e}")
        return False

    logger.info("[Startup] Database ready")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT}, API {settings.API_VERSION})")

    errors = check_configuration()
    if errors:
        for err in errors:
            logger.critical(f"[Startup] {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    if not await ensure_database_ready():
        logger.warning("[Startup] Continuing without a ready database - requests will fail")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Campus e-voting API: Google sign-in, identity verification and time-boxed ballots",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS, size limit, security headers, request logging
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, upload_limits=upload_limits())
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(EVotingError)
async def evoting_exception_handler(request: Request, exc: EVotingError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.code}: {exc.message}", extra={"error_code": exc.code, "http_path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": str(exc) if settings.DEBUG else "An error occurred",
            "error": {"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(api_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
