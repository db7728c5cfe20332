"""
test_commissions.py — commission tier selection and calculation.

Tiers are plain SimpleNamespace rows; the database is an AsyncMock whose
execute() result yields them.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from wethrift.commissions.calculator import calculate_commission, select_rate
from wethrift.commissions.schemas import ServiceType
from wethrift.database import get_db
from wethrift.main import app


def _rate(rate: str, group_id=None, minimum: str = "0", maximum: str | None = None):
    return SimpleNamespace(
        group_id=group_id,
        rate_percentage=Decimal(rate),
        minimum_amount=Decimal(minimum),
        maximum_amount=Decimal(maximum) if maximum is not None else None,
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )


def _db_with(rates) -> AsyncMock:
    db = AsyncMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = rates
    db.execute.return_value = result
    return db


# ---------------------------------------------------------------------------
# select_rate
# ---------------------------------------------------------------------------

def test_group_tier_beats_general_tier() -> None:
    general = _rate("2.50")
    group_tier = _rate("1.00", group_id="g1")

    assert select_rate([general, group_tier], Decimal("5000"), "g1") is group_tier


def test_general_tier_when_group_tier_out_of_range() -> None:
    general = _rate("2.50")
    group_tier = _rate("1.00", group_id="g1", minimum="10000")

    assert select_rate([group_tier, general], Decimal("5000"), "g1") is general


def test_other_groups_tiers_are_ignored() -> None:
    assert select_rate([_rate("1.00", group_id="g2")], Decimal("5000"), "g1") is None


def test_range_bounds_are_inclusive() -> None:
    tier = _rate("3.00", minimum="1000", maximum="5000")

    assert select_rate([tier], Decimal("1000"), None) is tier
    assert select_rate([tier], Decimal("5000"), None) is tier
    assert select_rate([tier], Decimal("5000.01"), None) is None
    assert select_rate([tier], Decimal("999.99"), None) is None


def test_newest_matching_tier_wins() -> None:
    newest, older = _rate("2.00"), _rate("3.00")

    assert select_rate([newest, older], Decimal("100"), None) is newest


# ---------------------------------------------------------------------------
# calculate_commission
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_calculate_commission() -> None:
    db = _db_with([_rate("2.50")])

    calc = await calculate_commission(db, ServiceType.savings, Decimal("10000"), user_id="user-1")

    assert calc.commission_amount == Decimal("250.00")
    assert calc.rate_percentage == Decimal("2.50")
    assert calc.group_id is None
    assert calc.user_id == "user-1"


@pytest.mark.asyncio
async def test_commission_rounds_half_up_to_kobo() -> None:
    db = _db_with([_rate("1.50")])

    calc = await calculate_commission(db, ServiceType.loans, Decimal("1234.56"))

    assert calc.commission_amount == Decimal("18.52")


@pytest.mark.asyncio
async def test_group_tier_sets_group_id() -> None:
    db = _db_with([_rate("1.00", group_id="g1")])

    calc = await calculate_commission(db, ServiceType.contributions, Decimal("2000"), group_id="g1")

    assert calc.group_id == "g1"
    assert calc.commission_amount == Decimal("20.00")


@pytest.mark.asyncio
async def test_no_tier_means_no_commission() -> None:
    assert await calculate_commission(_db_with([]), ServiceType.escrow, Decimal("500")) is None


# ---------------------------------------------------------------------------
# POST /api/commissions/calculate
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client_with_rates():
    holder = {"rates": []}

    async def _fake_db():
        yield _db_with(holder["rates"])

    app.dependency_overrides[get_db] = _fake_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac, holder
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_api_calculate(client_with_rates) -> None:
    client, holder = client_with_rates
    holder["rates"] = [_rate("2.50")]

    response = await client.post(
        "/api/commissions/calculate",
        json={"serviceType": "savings", "amount": 10000, "userId": "user-1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["serviceType"] == "savings"
    assert Decimal(body["data"]["commissionAmount"]) == Decimal("250.00")
    assert body["data"]["userId"] == "user-1"


@pytest.mark.asyncio
async def test_api_calculate_without_tier_returns_null(client_with_rates) -> None:
    client, _holder = client_with_rates

    response = await client.post(
        "/api/commissions/calculate", json={"serviceType": "escrow", "amount": 500}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}


@pytest.mark.asyncio
async def test_api_rejects_unknown_service_type(client_with_rates) -> None:
    client, _holder = client_with_rates

    response = await client.post(
        "/api/commissions/calculate", json={"serviceType": "lottery", "amount": 500}
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
