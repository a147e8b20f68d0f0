"""FastAPI application entry point.

This module creates and configures the FastAPI application instance.
The collection worker runs inside the application's event loop for the
lifetime of the process.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inforanker.api.v1 import collection_router
from inforanker.core.config import get_config
from inforanker.core.container import container
from inforanker.core.database import check_db_connection, close_db, init_db
from inforanker.core.logging import get_logger, setup_logging
from inforanker.core.redis import check_redis_connection

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Starts the collection worker on startup; stops it and releases clients
    on shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    config = get_config()
    logger.info("Starting InfoRanker application", env=config.app_env)

    # Create tables only in development; production uses migrations
    if config.is_development:
        if await check_db_connection():
            await init_db()
        else:
            logger.warning("Database connection not available, skipping initialization")

    worker = container.collection_worker()
    worker.start()

    yield

    logger.info("Shutting down InfoRanker application")
    await worker.stop()
    await container.http_client().close()
    await container.redis().aclose()
    await close_db()
    logger.info("Cleanup complete")


_config = get_config()
app = FastAPI(
    title=_config.app_name,
    description="Keyword-driven article collection and LLM-based ranking",
    version="0.1.0",
    docs_url="/docs" if _config.is_development else None,
    redoc_url="/redoc" if _config.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(collection_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status of the app and its backing services
    """
    cfg = get_config()
    database_ok = await check_db_connection()
    redis_ok = await check_redis_connection(container.redis())
    return {
        "status": "healthy" if database_ok else "degraded",
        "app": cfg.app_name,
        "env": cfg.app_env,
        "database": "ok" if database_ok else "unavailable",
        "redis": "ok" if redis_ok else "unavailable",
    }
