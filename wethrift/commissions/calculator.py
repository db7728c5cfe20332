"""
calculator.py — platform commission on thrift transactions.

Tier selection:
  1. active tiers for the service type, newest first
  2. a group-specific tier whose amount range contains the amount wins
  3. otherwise the first platform-wide tier (group_id NULL) that fits
  4. no fitting tier → no commission (None)

Amounts are Decimal throughout; the commission is rounded half-up to kobo.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.commissions.schemas import CommissionCalculation, ServiceType
from wethrift.models.commission_rate import CommissionRateORM

logger = logging.getLogger(__name__)

_KOBO = Decimal("0.01")


def _in_range(rate: CommissionRateORM, amount: Decimal) -> bool:
    if amount < rate.minimum_amount:
        return False
    return rate.maximum_amount is None or amount <= rate.maximum_amount


def select_rate(
    rates: Sequence[CommissionRateORM],
    amount: Decimal,
    group_id: Optional[str] = None,
) -> Optional[CommissionRateORM]:
    """Pick the applicable tier from `rates` (already ordered newest first)."""
    if group_id:
        for rate in rates:
            if rate.group_id == group_id and _in_range(rate, amount):
                return rate
    for rate in rates:
        if rate.group_id is None and _in_range(rate, amount):
            return rate
    return None


async def get_commission_rates(
    db: AsyncSession,
    service_type: ServiceType,
    group_id: Optional[str] = None,
) -> Sequence[CommissionRateORM]:
    """Active tiers for a service type: the group's own plus platform-wide, newest first."""
    stmt = (
        select(CommissionRateORM)
        .where(CommissionRateORM.is_active.is_(True))
        .where(CommissionRateORM.service_type == service_type.value)
        .order_by(CommissionRateORM.created_at.desc())
    )
    if group_id:
        stmt = stmt.where(
            or_(CommissionRateORM.group_id == group_id, CommissionRateORM.group_id.is_(None))
        )
    else:
        stmt = stmt.where(CommissionRateORM.group_id.is_(None))
    result = await db.execute(stmt)
    return result.scalars().all()


async def calculate_commission(
    db: AsyncSession,
    service_type: ServiceType,
    amount: Decimal,
    group_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Optional[CommissionCalculation]:
    """
    Commission for one transaction, or None when no tier applies.

    Args:
        db: Active database session.
        service_type: savings | loans | contributions | escrow | general.
        amount: Transaction amount in naira.
        group_id: Group the transaction belongs to, if any.
        user_id: Member the transaction belongs to, echoed back.
    """
    rates = await get_commission_rates(db, service_type, group_id)
    rate = select_rate(rates, amount, group_id)
    if rate is None:
        logger.info(
            "No commission tier service_type=%s group_id=%s", service_type.value, group_id
        )
        return None

    commission = (amount * Decimal(rate.rate_percentage) / 100).quantize(_KOBO, rounding=ROUND_HALF_UP)
    return CommissionCalculation(
        service_type=service_type,
        amount=amount,
        rate_percentage=Decimal(rate.rate_percentage),
        commission_amount=commission,
        group_id=rate.group_id or group_id,
        user_id=user_id,
    )
