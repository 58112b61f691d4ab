# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gallery.api.v1.routes import api_router
from gallery.core.config import settings
from gallery.core.database import db_helper
from gallery.core.exceptions import AppException
from gallery.core.logging_config import configure_logging

configure_logging(logging.INFO if settings.debug else logging.WARNING)
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Контекстный менеджер для жизненного цикла приложения"""
    logger.info(f"Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")

    masked_db_url = settings.db.DATABASE_URL
    if settings.db.DB_PASSWORD.get_secret_value():
        masked_db_url = masked_db_url.replace(
            settings.db.DB_PASSWORD.get_secret_value(),
            "***"
        )
    logger.info(f"Database: {masked_db_url}")
    logger.info(f"Token lifetime: {settings.security.TOKEN_EXPIRE_HOURS}h")

    try:
        await db_helper.ping()
        logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    yield

    await db_helper.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/", summary="Root endpoint", tags=["root"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        } if settings.debug else None,
        "environment": "development" if settings.debug else "production",
        "timestamp": _now()
    }


@app.get("/health", summary="Health check", tags=["health"])
async def health_check():
    try:
        db_value = await db_helper.ping()
        return {
            "status": "healthy",
            "timestamp": _now(),
            "database": "connected",
            "database_ping": db_value,
            "app_name": settings.app_name,
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": _now(),
                "database": "connection failed",
                "error": str(e) if settings.debug else "Database connection error"
            }
        )


@app.exception_handler(AppException)
async def app_exception_handler(request, exc: AppException):
    """Глобальный обработчик кастомных исключений"""
    if exc.status_code >= 500:
        logger.error(f"AppException: {exc.detail} (type: {type(exc).__name__})")
    else:
        logger.info(f"AppException: {exc.detail} (type: {type(exc).__name__})")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error": type(exc).__name__,
            "timestamp": _now()
        },
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": "InternalServerError",
            "timestamp": _now(),
            "debug_info": str(exc) if settings.debug else None
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False
    )
