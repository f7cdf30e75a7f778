"""
KV Gateway Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kv_gateway import __version__
from kv_gateway.api import kv_router
from kv_gateway.common.errors import AppError
from kv_gateway.config import get_settings
from kv_gateway.db.redis import close_redis, init_redis
from kv_gateway.db.session import close_db, init_db
from kv_gateway.logging_config import setup_logging
from kv_gateway.middleware import RequestLoggingMiddleware
from kv_gateway.scheduler import shutdown_scheduler, start_scheduler

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Connect the configured KV backend on startup, release it on shutdown.
    """
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME} with KV backend: {settings.KV_STORE_TYPE}")
    # Startup
    if settings.KV_STORE_TYPE == "database":
        await init_db()
        start_scheduler()
    elif settings.KV_STORE_TYPE == "redis":
        await init_redis()
    yield
    # Shutdown
    if settings.KV_STORE_TYPE == "database":
        shutdown_scheduler()
        await close_db()
    elif settings.KV_STORE_TYPE == "redis":
        await close_redis()


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="HTTP gateway over a key-value store with content-type metadata and structured values",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


# Global Exception Handler
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    In production mode, error details are hidden to prevent information leakage.
    """
    settings = get_settings()
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=settings.DEBUG),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    Stack traces are logged; only DEBUG mode returns them to the client.
    """
    settings = get_settings()
    logger.error(
        "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "message": str(exc),
                    "type": type(exc).__name__,
                    "code": "internal_error",
                    "traceback": traceback.format_exc().split("\n"),
                }
            },
        )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "message": "internal server error",
                "type": "internal_error",
                "code": "internal_error",
            }
        },
    )


@app.get("/", tags=["Health"])
async def root():
    """
    Root Path

    Service information, doubles as a liveness probe.
    """
    return {
        "name": settings.APP_NAME,
        "version": __version__,
        "kv_store": settings.KV_STORE_TYPE,
    }


# Register KV Router
app.include_router(kv_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kv_gateway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
