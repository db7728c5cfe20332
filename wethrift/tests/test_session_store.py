"""
test_session_store.py — Redis-first session storage with PostgreSQL fallback.

Redis is an AsyncMock; the PostgreSQL half (wethrift.store) is patched so no
database is needed.
"""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from wethrift import store
from wethrift.tests.fakes import PHONE, SESSION_ID
from wethrift.ussd.schemas import AwaitPin, MenuLevel, UssdSession
from wethrift.ussd.session_store import SessionStoreError, UssdSessionStore


def _redis(cached: dict | None = None) -> AsyncMock:
    client = AsyncMock()
    client.get.return_value = json.dumps(cached) if cached is not None else None
    return client


def _db() -> AsyncMock:
    db = AsyncMock()
    db.begin_nested = MagicMock()
    return db


def _store(redis_client, db=None) -> UssdSessionStore:
    return UssdSessionStore(redis_client, db or _db(), ttl_seconds=300)


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_prefers_redis() -> None:
    cached = UssdSession(
        session_id=SESSION_ID,
        phone_number=PHONE,
        menu_level=MenuLevel.auth,
        context=AwaitPin(phone=PHONE),
    ).model_dump(mode="json")
    redis_client = _redis(cached)

    with patch("wethrift.store.get_ussd_session", new=AsyncMock()) as pg_get:
        session = await _store(redis_client).get(SESSION_ID)

    redis_client.get.assert_awaited_once_with(f"ussd:{SESSION_ID}")
    pg_get.assert_not_awaited()
    assert session.menu_level == MenuLevel.auth
    assert session.context == AwaitPin(phone=PHONE)


@pytest.mark.asyncio
async def test_get_falls_back_to_postgres_within_ttl() -> None:
    durable = UssdSession(session_id=SESSION_ID, phone_number=PHONE, menu_level=MenuLevel.groups)
    db = AsyncMock()

    with patch("wethrift.store.get_ussd_session", new=AsyncMock(return_value=durable)) as pg_get:
        session = await _store(_redis(), db).get(SESSION_ID)

    pg_get.assert_awaited_once_with(db, SESSION_ID, max_idle=timedelta(seconds=300))
    assert session == durable


@pytest.mark.asyncio
async def test_get_absent_returns_none() -> None:
    with patch("wethrift.store.get_ussd_session", new=AsyncMock(return_value=None)):
        assert await _store(_redis()).get(SESSION_ID) is None


@pytest.mark.asyncio
async def test_get_wraps_redis_errors() -> None:
    redis_client = AsyncMock()
    redis_client.get.side_effect = RedisConnectionError("down")

    with pytest.raises(SessionStoreError):
        await _store(redis_client).get(SESSION_ID)


@pytest.mark.asyncio
async def test_get_wraps_corrupt_cache_entries() -> None:
    redis_client = AsyncMock()
    redis_client.get.return_value = "{not json"

    with pytest.raises(SessionStoreError):
        await _store(redis_client).get(SESSION_ID)


# ---------------------------------------------------------------------------
# create / update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_writes_both_stores_with_ttl() -> None:
    redis_client = _redis()

    with patch("wethrift.store.save_ussd_session", new=AsyncMock()) as pg_save:
        session = await _store(redis_client).create(SESSION_ID, PHONE)

    assert session.menu_level == MenuLevel.main
    assert session.is_authenticated is False
    assert session.context is None
    key, ttl, payload = redis_client.setex.await_args.args
    assert key == f"ussd:{SESSION_ID}"
    assert ttl == 300
    assert json.loads(payload)["session_id"] == SESSION_ID
    pg_save.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_stamps_updated_at() -> None:
    old = UssdSession(
        session_id=SESSION_ID,
        phone_number=PHONE,
        updated_at=datetime.now(timezone.utc) - timedelta(minutes=3),
    )

    with patch("wethrift.store.save_ussd_session", new=AsyncMock()):
        saved = await _store(_redis()).update(old)

    assert saved.updated_at > old.updated_at


@pytest.mark.asyncio
async def test_update_failure_carries_session_and_keeps_turn_writes() -> None:
    db = _db()
    session = UssdSession(session_id=SESSION_ID, phone_number=PHONE, menu_level=MenuLevel.loans)
    failure = OperationalError("INSERT", {}, Exception("connection lost"))

    with patch("wethrift.store.save_ussd_session", new=AsyncMock(side_effect=failure)):
        with pytest.raises(SessionStoreError) as exc_info:
            await _store(_redis(), db).update(session)

    assert exc_info.value.session.menu_level == MenuLevel.loans
    db.begin_nested.assert_called_once_with()
    db.begin_nested.return_value.__aexit__.assert_awaited_once()
    db.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_redis_write_failure_does_not_roll_back_db() -> None:
    db = _db()
    redis_client = _redis()
    redis_client.setex.side_effect = RedisConnectionError("down")

    with pytest.raises(SessionStoreError):
        await _store(redis_client, db).create(SESSION_ID, PHONE)

    db.rollback.assert_not_awaited()


@pytest.mark.asyncio
async def test_postgres_read_failure_rolls_back() -> None:
    db = _db()
    failure = OperationalError("SELECT", {}, Exception("connection lost"))

    with patch("wethrift.store.get_ussd_session", new=AsyncMock(side_effect=failure)):
        with pytest.raises(SessionStoreError):
            await _store(_redis(), db).get(SESSION_ID)

    db.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_rollback_discards_request_transaction() -> None:
    db = _db()

    await _store(_redis(), db).rollback()

    db.rollback.assert_awaited_once()


# ---------------------------------------------------------------------------
# wethrift.store (PostgreSQL half) against a mocked AsyncSession
# ---------------------------------------------------------------------------

def _db_returning(orm) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = orm
    db.execute.return_value = result
    db.add = MagicMock()
    return db


def _orm_row(updated_at: datetime) -> SimpleNamespace:
    return SimpleNamespace(
        session_id=SESSION_ID,
        phone_number=PHONE,
        menu_level="groups",
        user_input="2",
        is_authenticated=True,
        user_id="user-1",
        group_id=None,
        context={"step": "await_text", "prompt": "create_group"},
        created_at=updated_at,
        updated_at=updated_at,
    )


@pytest.mark.asyncio
async def test_store_reads_fresh_row() -> None:
    db = _db_returning(_orm_row(datetime.now(timezone.utc)))

    session = await store.get_ussd_session(db, SESSION_ID, max_idle=timedelta(minutes=5))

    assert session.menu_level == MenuLevel.groups
    assert session.context.prompt.value == "create_group"


@pytest.mark.asyncio
async def test_store_ignores_stale_row() -> None:
    db = _db_returning(_orm_row(datetime.now(timezone.utc) - timedelta(minutes=30)))

    assert await store.get_ussd_session(db, SESSION_ID, max_idle=timedelta(minutes=5)) is None


@pytest.mark.asyncio
async def test_store_inserts_new_row() -> None:
    db = _db_returning(None)
    session = UssdSession(session_id=SESSION_ID, phone_number=PHONE, context=AwaitPin(phone=PHONE))

    await store.save_ussd_session(db, session)

    orm = db.add.call_args.args[0]
    assert orm.session_id == SESSION_ID
    assert orm.menu_level == "main"
    assert orm.context == {"step": "await_pin", "phone": PHONE, "attempts": 0}
    db.flush.assert_awaited_once()


@pytest.mark.asyncio
async def test_store_purge_returns_count() -> None:
    db = AsyncMock()
    db.execute.return_value = MagicMock(rowcount=4)

    removed = await store.purge_expired_ussd_sessions(db, timedelta(minutes=5))

    assert removed == 4
    db.flush.assert_awaited_once()
