"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
import psycopg
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from psycopg_pool import PoolTimeout

from gamepass.api.routes import router
from gamepass.api.middleware import setup_cors, setup_rate_limiting
from gamepass.db.connection import db
from gamepass.exceptions import GamePassError, wrap_external_exception
from gamepass.services import init_container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    # Startup
    logger.info("Starting API server...")
    await db.init_pool()
    logger.info("Database pool initialized")
    init_container(db)

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Game Pass API",
        description="Achievement claims, moderation and seasonal progression",
        version="1.0.0",
        lifespan=lifespan
    )

    # Setup middleware
    setup_cors(app)
    setup_rate_limiting(app)

    # Include routes
    app.include_router(router)

    @app.exception_handler(GamePassError)
    async def gamepass_exception_handler(request: Request, exc: GamePassError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(psycopg.Error)
    @app.exception_handler(PoolTimeout)
    async def database_exception_handler(request: Request, exc: Exception):
        error = wrap_external_exception(exc, operation=f"{request.method} {request.url.path}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc)}
        )

    logger.info("FastAPI application created")

    return app
