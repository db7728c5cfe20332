"""
services/savings.py — contribution reads.
"""
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.contribution import ContributionORM


async def get_user_contributions(
    db: AsyncSession,
    user_id: str,
    group_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> Sequence[ContributionORM]:
    """The member's contributions, newest first, optionally scoped to one group."""
    stmt = (
        select(ContributionORM)
        .where(ContributionORM.user_id == user_id)
        .order_by(ContributionORM.created_at.desc())
    )
    if group_id:
        stmt = stmt.where(ContributionORM.group_id == group_id)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


def total_completed(contributions: Iterable[ContributionORM]) -> Decimal:
    """Savings balance: sum of completed contributions only."""
    return sum(
        (Decimal(c.amount) for c in contributions if c.status == "completed"),
        Decimal("0"),
    )
