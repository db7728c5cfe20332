"""
services/complaints.py — complaint reads.
"""
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.complaint import ComplaintORM


async def get_user_complaints(
    db: AsyncSession,
    user_id: str,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> Sequence[ComplaintORM]:
    """Complaints filed by the member, newest first."""
    stmt = (
        select(ComplaintORM)
        .where(ComplaintORM.user_id == user_id)
        .order_by(ComplaintORM.created_at.desc())
    )
    if status:
        stmt = stmt.where(ComplaintORM.status == status)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()
