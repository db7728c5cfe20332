"""
services/loans.py — loan reads.
"""
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.loan import LoanORM


async def get_user_loans(
    db: AsyncSession,
    user_id: str,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> Sequence[LoanORM]:
    """The member's loans, newest first, optionally filtered by status."""
    stmt = (
        select(LoanORM)
        .where(LoanORM.user_id == user_id)
        .order_by(LoanORM.created_at.desc())
    )
    if status:
        stmt = stmt.where(LoanORM.status == status)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()
