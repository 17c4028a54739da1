"""
Caching helpers for API responses
Uses Redis (django-redis) in production and the local-memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
PRODUCTS_LIST_CACHE_TTL = 300  # 5 minutes
SALESMEN_LIST_CACHE_TTL = 600  # 10 minutes
REPORTS_CACHE_TTL = 120  # 2 minutes, bills keep arriving during the day


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    # Convert args and kwargs to a stable string representation
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive API calls

    The `client` keyword argument is not part of the cache key.

    Usage:
        @cached_query(cache_ttl=120, key_prefix="daily_sales")
        def get_daily_sales_report(company_id, date, client=None):
            return client.get(...)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            key_kwargs = {k: v for k, v in kwargs.items() if k != 'client'}
            cache_key = make_cache_key(key_prefix, *args, **key_kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)

            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Only possible on Redis; the local-memory cache relies on TTL expiration
    """
    if not settings.REDIS_URL:
        logger.debug(f"No Redis configured, {pattern} keys expire by TTL")
        return

    from django_redis import get_redis_connection
    redis_conn = get_redis_connection("default")

    keys = []
    cursor = 0
    while True:
        cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
        keys.extend(partial_keys)
        if cursor == 0:
            break

    if keys:
        redis_conn.delete(*keys)
        logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")


def invalidate_reports_cache():
    """Invalidate cached daily sales and commission reports"""
    invalidate_cache_pattern("daily_sales")
    invalidate_cache_pattern("salesman_commission")
