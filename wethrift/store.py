"""
store.py — Durable persistence for USSD dialog state.

Provides the PostgreSQL half of the dual-store session pattern (cache.py is
the Redis half). The session store composes both; nothing else touches
UssdSessionORM directly.

Design principles:
  - All functions are async and accept an AsyncSession parameter
  - No raw SQL: ORM-only queries
  - Logs only session_id / counts — never phone numbers or PINs
  - Returns domain Pydantic objects (not ORM instances) so callers are persistence-agnostic
  - Uses flush() (not commit()) — the caller / get_db() dependency handles commit
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.ussd_session import UssdSessionORM
from wethrift.ussd.schemas import UssdSession

logger = logging.getLogger(__name__)


async def get_ussd_session(
    db: AsyncSession,
    session_id: str,
    max_idle: Optional[timedelta] = None,
) -> Optional[UssdSession]:
    """
    Retrieve a dialog by session_id.

    Returns None if not found, or if max_idle is given and the row has not
    been written within that window (a dialog the gateway has already dropped).
    """
    result = await db.execute(
        select(UssdSessionORM).where(UssdSessionORM.session_id == session_id)
    )
    orm = result.scalar_one_or_none()
    if orm is None:
        return None
    if max_idle is not None and orm.updated_at < datetime.now(timezone.utc) - max_idle:
        logger.info("Ignoring stale USSD session session_id=%s", session_id)
        return None
    return UssdSession.model_validate(orm)


async def save_ussd_session(db: AsyncSession, session: UssdSession) -> None:
    """
    Upsert a dialog. The stored row is overwritten blindly: last write wins.
    """
    result = await db.execute(
        select(UssdSessionORM).where(UssdSessionORM.session_id == session.session_id)
    )
    orm = result.scalar_one_or_none()
    context = session.context.model_dump(mode="json") if session.context else None

    if orm is None:
        orm = UssdSessionORM(
            session_id=session.session_id,
            phone_number=session.phone_number,
            created_at=session.created_at,
        )
        db.add(orm)

    orm.menu_level = session.menu_level.value
    orm.user_input = session.user_input
    orm.is_authenticated = session.is_authenticated
    orm.user_id = session.user_id
    orm.group_id = session.group_id
    orm.context = context
    orm.updated_at = session.updated_at

    await db.flush()
    logger.debug(
        "Saved USSD session session_id=%s menu_level=%s",
        session.session_id,
        session.menu_level.value,
    )


async def purge_expired_ussd_sessions(
    db: AsyncSession,
    max_idle: timedelta,
    now: Optional[datetime] = None,
) -> int:
    """
    Delete dialogs idle for longer than max_idle. Returns the number removed.
    """
    cutoff = (now or datetime.now(timezone.utc)) - max_idle
    result = await db.execute(
        delete(UssdSessionORM).where(UssdSessionORM.updated_at < cutoff)
    )
    await db.flush()
    removed = result.rowcount or 0
    if removed:
        logger.info("Purged %d idle USSD sessions older than %s", removed, cutoff.isoformat())
    return removed
