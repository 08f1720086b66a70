"""
Redis caching utilities for the Bobinas service.

Holds the revocation list of signed-out access tokens. Cache failures are
logged and never fail the request.
"""
import json
import logging
from typing import Optional, Any
import redis

from .config import REDIS_URL

logger = logging.getLogger(__name__)

# Initialize Redis client
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

REVOKED_TOKEN_PREFIX = "revoked_token"


def get_cache(key: str) -> Optional[Any]:
    """
    Get a value from Redis cache.

    Args:
        key: Cache key

    Returns:
        Cached value or None if not found
    """
    try:
        value = redis_client.get(key)
        if value:
            return json.loads(value)
        return None
    except Exception as e:
        logger.warning(f"Cache get error: {e}")
        return None

def set_cache(key: str, value: Any, ttl: int = 300) -> bool:
    """
    Set a value in Redis cache with TTL.

    Args:
        key: Cache key
        value: Value to cache (will be JSON serialized)
        ttl: Time to live in seconds

    Returns:
        True if successful, False otherwise
    """
    try:
        redis_client.setex(key, ttl, json.dumps(value))
        return True
    except Exception as e:
        logger.warning(f"Cache set error: {e}")
        return False

def revoke_token(jti: str, ttl: int) -> bool:
    """Mark a token id as revoked until it would have expired anyway."""
    return set_cache(f"{REVOKED_TOKEN_PREFIX}:{jti}", True, max(ttl, 1))

def is_token_revoked(jti: str) -> bool:
    return bool(get_cache(f"{REVOKED_TOKEN_PREFIX}:{jti}"))
