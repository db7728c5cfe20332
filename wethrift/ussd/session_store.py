"""
session_store.py — keyed storage for UssdSession records.

Reads go to Redis first (live, TTL-bounded) and fall back to PostgreSQL only
for rows written within the TTL. Writes go to both and reset the TTL; the
PostgreSQL row is written inside a SAVEPOINT so a failed session save leaves
the rest of the request transaction intact.

Failures never pass silently here: every backend error is raised as
SessionStoreError. For create/update the error carries the in-memory session
so the caller can choose to keep the dialog going for the current turn.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift import cache, store
from wethrift.config import settings
from wethrift.ussd.schemas import UssdSession

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (RedisError, SQLAlchemyError, ValueError)


class SessionStoreError(Exception):
    """A session read or write failed. `session` is the unsaved in-memory record, if any."""

    def __init__(self, message: str, session: Optional[UssdSession] = None) -> None:
        super().__init__(message)
        self.session = session


class UssdSessionStore:
    """Session Store bound to one request's Redis client and database session."""

    def __init__(
        self,
        redis: aioredis.Redis,
        db: AsyncSession,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._redis = redis
        self._db = db
        self._ttl = ttl_seconds or settings.ussd_session_ttl_seconds

    async def get(self, session_id: str) -> Optional[UssdSession]:
        try:
            data = await cache.get_ussd_session_data(self._redis, session_id)
            if data is not None:
                return UssdSession.model_validate(data)
            return await store.get_ussd_session(
                self._db, session_id, max_idle=timedelta(seconds=self._ttl)
            )
        except _BACKEND_ERRORS as exc:
            await self._rollback_if_needed(exc)
            raise SessionStoreError(f"Failed to load session {session_id}") from exc

    async def create(self, session_id: str, phone_number: str) -> UssdSession:
        session = UssdSession(session_id=session_id, phone_number=phone_number)
        return await self._write(session, "create")

    async def update(self, session: UssdSession) -> UssdSession:
        return await self._write(session, "update")

    async def _write(self, session: UssdSession, operation: str) -> UssdSession:
        session = session.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        try:
            await cache.set_ussd_session_data(
                self._redis,
                session.session_id,
                session.model_dump(mode="json"),
                ttl=self._ttl,
            )
            async with self._db.begin_nested():
                await store.save_ussd_session(self._db, session)
        except _BACKEND_ERRORS as exc:
            raise SessionStoreError(
                f"Failed to {operation} session {session.session_id}", session=session
            ) from exc
        return session

    async def rollback(self) -> None:
        """Discard everything this turn wrote to PostgreSQL."""
        await self._db.rollback()

    async def _rollback_if_needed(self, exc: Exception) -> None:
        # A failed query leaves the transaction unusable for the rest of the request
        if isinstance(exc, SQLAlchemyError):
            await self._db.rollback()
