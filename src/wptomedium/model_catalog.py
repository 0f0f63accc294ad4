"""Cached model listing and configured-model resolution."""

import logging
from typing import Any

from redis.exceptions import RedisError

from .ai_client import AIClient, ProviderError
from .cache import CacheStore
from .config import AIConfig

logger = logging.getLogger(__name__)

CACHE_KEY = "wptomedium:models"
DEFAULT_TTL = 12 * 60 * 60

# Cache backend failures; the catalog then behaves as if nothing were cached
CACHE_ERRORS = (RedisError, OSError)


class ModelCatalog:
    """Read-through cache in front of the provider's model list."""

    def __init__(self, client: AIClient, cache: CacheStore, ttl: int = DEFAULT_TTL):
        self.client = client
        self.cache = cache
        self.ttl = ttl

    async def _cached(self) -> Any | None:
        try:
            return await self.cache.get(CACHE_KEY)
        except CACHE_ERRORS as e:
            logger.warning(f"Model cache read failed ({e}), treating as miss")
            return None

    async def _store(self, models: dict[str, str]) -> None:
        try:
            await self.cache.set(CACHE_KEY, models, self.ttl)
        except CACHE_ERRORS as e:
            logger.warning(f"Model cache write failed ({e})")

    async def _invalidate(self) -> None:
        try:
            await self.cache.delete(CACHE_KEY)
        except CACHE_ERRORS as e:
            logger.warning(f"Model cache invalidation failed ({e})")

    async def list_models(self, api_key: str, force_refresh: bool = False) -> dict[str, str]:
        """
        Return model id -> display name.

        A failing cache backend is treated as empty; the list is then
        fetched from the provider on every call.

        Args:
            api_key: Provider API key
            force_refresh: Drop the cached list and fetch again

        Raises:
            ProviderError: If the list has to be fetched and fetching fails
        """
        if force_refresh:
            await self._invalidate()
        else:
            cached = await self._cached()
            if cached:
                return dict(cached)

        models = await self.client.list_models(api_key)
        if models:
            await self._store(models)
        return models

    async def resolve(self, config: AIConfig) -> str:
        """
        Return the model to use for a translation.

        If the configured model is not offered, the list is refreshed once;
        if it is still missing the first offered model replaces it in
        ``config``. When no list can be obtained the configured model is used.
        """
        configured = config.model
        try:
            cached = await self._cached()
            models = dict(cached) if cached else await self.list_models(config.api_key)
            if configured in models:
                return configured

            if cached:
                models = await self.list_models(config.api_key, force_refresh=True)
                if configured in models:
                    return configured
        except ProviderError as e:
            logger.warning(f"Could not list models ({e.kind.value}), keeping {configured}")
            return configured

        if not models:
            return configured

        fallback = next(iter(models))
        logger.warning(f"Model {configured} is not available, falling back to {fallback}")
        config.model = fallback
        return fallback
