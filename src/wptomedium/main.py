"""FastAPI application: lifespan wiring and health endpoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from . import __version__
from .ai_client import AIClient
from .api import router
from .auth import get_auth_status
from .cache import CacheStore, MemoryCacheStore, RedisCacheStore
from .config import Settings, get_settings
from .logging_config import get_logger, setup_logging
from .model_catalog import ModelCatalog
from .store import ArticleStore
from .translator import Translator

# Load settings and configure logging
settings = get_settings()
setup_logging(settings.logging)
logger = get_logger(__name__)


_STARTUP_LEVELS = {"INFO": logging.INFO, "WARNING": logging.WARNING, "ERROR": logging.ERROR}


def _log_startup_messages(messages: list[str]) -> None:
    """Log "LEVEL: text" lines from Settings.validate_settings()."""
    for message in messages:
        level, _, text = message.partition(": ")
        logger.log(_STARTUP_LEVELS.get(level, logging.INFO), text or message)


def create_cache(current_settings: Settings) -> CacheStore:
    """Redis when REDIS_URI is configured, process memory otherwise."""
    if current_settings.redis.redis_uri:
        return RedisCacheStore(
            current_settings.redis.redis_uri,
            max_connections=current_settings.redis.max_connections,
        )
    return MemoryCacheStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the AI client, model cache and translator; close them on shutdown."""
    # get_settings() again so tests can reload the environment
    current_settings = get_settings()
    app.state.settings = current_settings

    logger.info(
        f"Starting {current_settings.app_name} v{current_settings.app_version} "
        f"({current_settings.environment})"
    )
    _log_startup_messages(current_settings.validate_settings())

    ai_client = AIClient(
        base_url=current_settings.ai.base_url,
        api_version=current_settings.ai.api_version,
        timeout=current_settings.ai.request_timeout,
    )
    app.state.ai_client = ai_client

    cache = create_cache(current_settings)
    try:
        await cache.connect()
    except Exception as e:
        logger.warning(f"Model cache unavailable ({e}), using in-memory cache")
        cache = MemoryCacheStore()
    app.state.cache = cache

    catalog = ModelCatalog(ai_client, cache, ttl=current_settings.cache.models_ttl)
    app.state.store = ArticleStore()
    app.state.translator = Translator(
        current_settings.ai, app.state.store, ai_client, catalog=catalog
    )
    logger.info("Translator initialized")

    yield

    logger.info("Shutting down services...")
    await ai_client.close()
    await cache.disconnect()
    logger.info("All services shut down successfully")


app = FastAPI(
    title="WPtoMedium",
    description="Translate German blog posts to English and export them for Medium",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    app_settings = request.app.state.settings
    cache = request.app.state.cache

    health_info = {
        "status": "healthy",
        "version": __version__,
        "environment": app_settings.environment,
        "services": {
            "ai": {
                "configured": bool(app_settings.ai.api_key),
                "model": app_settings.ai.model,
            },
            "model_cache": {
                "backend": "redis" if isinstance(cache, RedisCacheStore) else "memory",
            },
        },
    }
    health_info.update(get_auth_status(app_settings))
    return health_info


# Include API router (must be after specific routes like /health)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("wptomedium.main:app", host="0.0.0.0", port=8000, reload=True)
