"""
sweeper.py — background eviction of idle USSD dialogs from PostgreSQL.

Redis expires live dialogs on its own; the durable rows would otherwise grow
forever. Started once from the FastAPI lifespan and cancelled on shutdown.
"""
import asyncio
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from wethrift.config import settings
from wethrift.database import AsyncSessionLocal
from wethrift.store import purge_expired_ussd_sessions

logger = logging.getLogger(__name__)


async def sweep_once(session_factory=AsyncSessionLocal) -> int:
    """Delete every dialog idle longer than the session TTL. Returns the count removed."""
    max_idle = timedelta(seconds=settings.ussd_session_ttl_seconds)
    async with session_factory() as db:
        removed = await purge_expired_ussd_sessions(db, max_idle)
        await db.commit()
    return removed


async def run_session_sweeper(
    interval: Optional[float] = None,
    session_factory=AsyncSessionLocal,
) -> None:
    """Run sweep_once every `interval` seconds until cancelled."""
    seconds = interval or settings.ussd_sweep_interval_seconds
    logger.info("USSD session sweeper started (interval=%ss)", seconds)
    try:
        while True:
            try:
                removed = await sweep_once(session_factory)
                logger.debug("USSD session sweep removed=%d", removed)
            except (SQLAlchemyError, OSError):
                logger.exception("USSD session sweep failed; retrying next interval")
            await asyncio.sleep(seconds)
    except asyncio.CancelledError:
        logger.info("USSD session sweeper stopped")
        raise
