"""
Rate limiting for the unauthenticated endpoints (login, public documents,
client portal).

Counters live in process memory and are written to Redis every
MEMORY_CACHE_SYNC_INTERVAL seconds, so several workers converge on a shared
count without a Redis round trip per request. A new key starts from the
shared count when Redis has one. Without Redis each worker limits on its own.
"""

import logging
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request

from . import config

logger = logging.getLogger(__name__)

MEMORY_CACHE_SYNC_INTERVAL = 10
MEMORY_CACHE_CLEANUP_INTERVAL = 60
REDIS_RETRY_INTERVAL = 60

# {key: {"count": int, "reset_time": int, "last_redis_sync": int}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

redis_client: Optional[redis.Redis] = None
redis_retry_after = 0.0
last_cleanup_time = 0


def _get_redis_or_none() -> Optional[redis.Redis]:
    """Shared Redis client, or None while Redis is unreachable"""
    global redis_client, redis_retry_after

    if redis_client is not None:
        return redis_client
    if time.time() < redis_retry_after:
        return None

    try:
        client = redis.from_url(
            config.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
    except redis.RedisError as e:
        redis_retry_after = time.time() + REDIS_RETRY_INTERVAL
        logger.warning(f"⚠️ Redis unavailable, rate limiting is per-process only: {e}")
        return None

    logger.info("Redis connected for rate limiting")
    redis_client = client
    return redis_client


def _drop_expired(now: int):
    global last_cleanup_time
    if now - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return
    expired = [key for key, entry in memory_cache.items() if now >= entry["reset_time"]]
    for key in expired:
        del memory_cache[key]
    if expired:
        logger.debug(f"🧹 Dropped {len(expired)} expired rate limit windows")
    last_cleanup_time = now


def _new_window(key: str, now: int, window_seconds: int, client: Optional[redis.Redis]) -> dict:
    entry = {"count": 0, "reset_time": now + window_seconds, "last_redis_sync": now}
    if client is None:
        return entry
    try:
        shared_count = client.get(key)
        shared_ttl = client.ttl(key)
    except redis.RedisError as e:
        logger.warning(f"⚠️ Could not read {key} from Redis: {e}")
        return entry
    if shared_count and shared_ttl > 0:
        entry["count"] = int(shared_count)
        entry["reset_time"] = now + shared_ttl
    return entry


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: Optional[redis.Redis] = None
) -> tuple[bool, int, int]:
    """
    Count one request against key.

    Returns:
        (allowed, count in the current window, seconds until the window resets)
    """
    now = int(time.time())

    with cache_lock:
        _drop_expired(now)

        entry = memory_cache.get(key)
        if entry is None:
            entry = memory_cache[key] = _new_window(key, now, window_seconds, client)
        elif now >= entry["reset_time"]:
            entry.update(count=0, reset_time=now + window_seconds, last_redis_sync=0)

        allowed = entry["count"] < limit
        if allowed:
            entry["count"] += 1

        if client is not None and now - entry["last_redis_sync"] >= MEMORY_CACHE_SYNC_INTERVAL:
            try:
                client.set(key, entry["count"], ex=window_seconds)
                entry["last_redis_sync"] = now
            except redis.RedisError as e:
                logger.warning(f"⚠️ Failed to sync {key} to Redis: {e}")

        return allowed, entry["count"], max(0, entry["reset_time"] - now)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str):
    """
    Per-IP limit as a FastAPI dependency:

        rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")

        @router.post("/api/auth/login", dependencies=[Depends(rate_limit_login)])
    """

    async def rate_limiter(request: Request):
        if not config.RATE_LIMIT_ENABLED:
            return

        key = f"{key_prefix}:{client_ip(request)}"
        allowed, count, retry_after = check_rate_limit(key, limit, window_seconds, _get_redis_or_none())
        if not allowed:
            logger.warning(f"🚫 Rate limit exceeded for {key} ({count}/{limit})")
            raise HTTPException(
                status_code=429,
                detail={
                    "message": f"Too many requests. Try again in {retry_after} seconds.",
                    "retry_after": retry_after,
                    "limit": limit,
                    "window_seconds": window_seconds,
                },
                headers={"Retry-After": str(retry_after)},
            )

    return rate_limiter
