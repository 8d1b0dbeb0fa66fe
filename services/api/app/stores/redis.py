"""Redis store for webhook delivery de-duplication.

Slack redelivers an Events API callback when the first delivery is not
acknowledged fast enough. Each event_id is claimed once with SET NX + TTL so
a redelivery is acknowledged without touching the counters again.

If Redis is not initialized (tests / local minimal env) helpers raise
RuntimeError and callers fall back to processing without de-dup.
"""

import logging

import redis.asyncio as redis

from app.settings import get_settings

# TTL constants (in seconds)
TTL_EVENT_CLAIM = 3600  # 1 hour

# Key prefixes
PREFIX_EVENT = "slack:event:"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    client = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Install only a client that answered PING.
    try:
        await client.ping()
    except Exception:
        await client.aclose()
        raise
    _redis = client
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


async def claim_event(event_id: str, ttl: int = TTL_EVENT_CLAIM) -> bool:
    """Claim an Events API delivery.

    Args:
        event_id: Slack event_id (stable across redeliveries).
        ttl: How long the claim is remembered, in seconds.

    Returns:
        True if this is the first delivery, False if already claimed.
    """
    # SET NX (only if not exists) with TTL
    result = await _get_redis().set(f"{PREFIX_EVENT}{event_id}", "1", nx=True, ex=ttl)
    return result is not None


async def release_event(event_id: str) -> None:
    """Forget a claim so a redelivery is processed again (used when processing failed)."""
    await _get_redis().delete(f"{PREFIX_EVENT}{event_id}")
