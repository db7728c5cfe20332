"""
cache.py — Redis layer for live USSD dialog state.

Namespace conventions:
  ussd:{session_id}   -> serialized UssdSession   TTL settings.ussd_session_ttl_seconds

Design:
  - Uses redis.asyncio (async client, part of redis-py 5.x — do NOT use aioredis separately)
  - Pool created once in lifespan, stored on app.state.redis
  - Helper functions take the client as a param — no module-level global state
  - Every write resets the TTL, so an idle dialog disappears on its own
  - Logs only session_id (not data values) — no PII in logs
"""
import json
import logging
from typing import Optional

import redis.asyncio as aioredis

from wethrift.config import settings

logger = logging.getLogger(__name__)

USSD_SESSION_PREFIX = "ussd"


def make_ussd_session_key(session_id: str) -> str:
    """Build Redis key for a USSD dialog: ussd:{session_id}"""
    return f"{USSD_SESSION_PREFIX}:{session_id}"


# ---------------------------------------------------------------------------
# Pool factory — called once in lifespan
# ---------------------------------------------------------------------------

async def create_redis_pool() -> aioredis.Redis:
    """
    Create and return an async Redis connection pool.
    Called once in FastAPI lifespan startup — stored on app.state.redis.
    Verifies connectivity with PING before returning.
    """
    client = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    await client.ping()
    logger.info("Redis connection pool established at %s", settings.redis_url)
    return client


# ---------------------------------------------------------------------------
# USSD session helpers
# ---------------------------------------------------------------------------

async def get_ussd_session_data(
    client: aioredis.Redis, session_id: str
) -> Optional[dict]:
    """
    Retrieve a dialog dict from Redis.
    Returns None if the dialog expired or never existed.
    """
    raw = await client.get(make_ussd_session_key(session_id))
    if raw is None:
        return None
    return json.loads(raw)


async def set_ussd_session_data(
    client: aioredis.Redis,
    session_id: str,
    data: dict,
    ttl: Optional[int] = None,
) -> None:
    """
    Store a dialog dict with TTL. Overwrites any existing value.
    `data` must already be JSON-ready (model_dump(mode="json")).
    """
    seconds = ttl or settings.ussd_session_ttl_seconds
    await client.setex(make_ussd_session_key(session_id), seconds, json.dumps(data))
    logger.debug("USSD session cached session_id=%s ttl=%ds", session_id, seconds)

