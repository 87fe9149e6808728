import json
import logging
import redis
from typing import Optional, Any

from stockapp.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class CacheService:
    """
    Redis cache service for the product listing.

    The cache is best effort: a Redis failure behaves like a miss and never
    fails the request. Every write that changes a product must call
    invalidate_products().

    The listing is stored under a generation number (products:version).
    A reader takes the generation before querying the database and caches
    its result under that generation only. A write bumps the generation, so
    a listing computed before the write can never be served after it.
    """

    PRODUCTS_PREFIX = "products"
    PRODUCTS_KEY = "all"
    PRODUCTS_VERSION_KEY = "version"

    def __init__(self, client: redis.Redis = None, ttl: int = None, enabled: bool = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled

    def _make_key(self, prefix: str, key: str) -> str:
        """Create a namespaced cache key."""
        return f"{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            prefix: Cache key prefix (e.g., 'products')
            key: Unique identifier

        Returns:
            Cached value or None if not found
        """
        if not self.enabled:
            return None
        cache_key = self._make_key(prefix, key)
        try:
            value = self.client.get(cache_key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set a value in cache with TTL.

        Args:
            prefix: Cache key prefix
            key: Unique identifier
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds (optional, uses default if not provided)

        Returns:
            True if successful, False otherwise
        """
        if not self.enabled:
            return False
        cache_key = self._make_key(prefix, key)
        ttl = ttl or self.ttl
        try:
            serialized = json.dumps(value, default=str)
            self.client.setex(cache_key, ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")
            return False

    def products_version(self) -> Optional[str]:
        """
        Current generation of the product listing.

        Returns None when the cache is disabled or Redis is unreachable, in
        which case the listing must not be cached.
        """
        if not self.enabled:
            return None
        cache_key = self._make_key(self.PRODUCTS_PREFIX, self.PRODUCTS_VERSION_KEY)
        try:
            return str(self.client.get(cache_key) or 0)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def _products_key(self, version: str) -> str:
        return f"{self.PRODUCTS_KEY}:{version}"

    def get_products(self, version: Optional[str]) -> Optional[list]:
        if version is None:
            return None
        return self.get(self.PRODUCTS_PREFIX, self._products_key(version))

    def set_products(self, version: Optional[str], products: list) -> bool:
        if version is None:
            return False
        return self.set(self.PRODUCTS_PREFIX, self._products_key(version), products)

    def invalidate_products(self) -> bool:
        """Start a new listing generation. Older generations expire with their TTL."""
        if not self.enabled:
            return False
        cache_key = self._make_key(self.PRODUCTS_PREFIX, self.PRODUCTS_VERSION_KEY)
        try:
            self.client.incr(cache_key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache invalidation failed for {cache_key}: {e}")
            return False


# Singleton cache service instance
cache_service = CacheService()
