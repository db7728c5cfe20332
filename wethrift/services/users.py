"""
services/users.py — member lookup for the USSD login flow.

Authentication itself (web sessions, email/password) belongs to the external
identity provider; the USSD channel only needs "which member owns this phone".
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.user import UserORM
from wethrift.ussd.validator import mask_phone, phone_variants

logger = logging.getLogger(__name__)


async def find_user_by_phone(db: AsyncSession, phone: str) -> Optional[UserORM]:
    """
    Return the active member registered with this phone number, in any of
    its +234 / 234 / 0 spellings. None if no such member.

    Raises:
        ValueError: if `phone` is not a valid Nigerian MSISDN.
    """
    result = await db.execute(
        select(UserORM)
        .where(UserORM.phone.in_(phone_variants(phone)))
        .where(UserORM.is_active.is_(True))
        .order_by(UserORM.created_at.asc())
        .limit(1)
    )
    user = result.scalars().first()
    if user is None:
        logger.info("No active member for phone=%s", mask_phone(phone))
    return user
