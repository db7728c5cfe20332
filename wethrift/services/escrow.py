"""
services/escrow.py — escrow transaction reads.
"""
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.escrow import EscrowTransactionORM


async def get_user_escrow_transactions(
    db: AsyncSession,
    user_id: str,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> Sequence[EscrowTransactionORM]:
    """Transactions where the member is buyer or seller, newest first."""
    stmt = (
        select(EscrowTransactionORM)
        .where(
            or_(
                EscrowTransactionORM.buyer_id == user_id,
                EscrowTransactionORM.seller_id == user_id,
            )
        )
        .order_by(EscrowTransactionORM.created_at.desc())
    )
    if status:
        stmt = stmt.where(EscrowTransactionORM.status == status)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()
