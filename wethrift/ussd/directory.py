"""
directory.py — the read/lookup collaborators the USSD engine consults.

ThriftDirectory binds the service functions to one request's AsyncSession so
the engine never sees SQLAlchemy. Tests substitute an in-memory fake with the
same method names.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.complaint import ComplaintORM
from wethrift.models.contribution import ContributionORM
from wethrift.models.escrow import EscrowTransactionORM
from wethrift.models.group import GroupORM
from wethrift.models.loan import LoanORM
from wethrift.security import verify_pin
from wethrift.services import complaints, escrow, groups, loans, savings, users
from wethrift.ussd.validator import mask_phone

logger = logging.getLogger(__name__)


class ThriftDirectory:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def authenticate(self, phone: str, pin: str) -> Optional[str]:
        """Return the member id when `pin` matches the member owning `phone`, else None."""
        user = await users.find_user_by_phone(self._db, phone)
        if user is None:
            return None
        # PBKDF2 is CPU-bound; run it off the event loop
        if not await asyncio.to_thread(verify_pin, pin, user.ussd_pin_hash):
            logger.info("USSD PIN rejected phone=%s", mask_phone(phone))
            return None
        return user.id

    async def list_groups(self, user_id: str) -> Sequence[GroupORM]:
        return await groups.get_user_groups(self._db, user_id)

    async def list_contributions(
        self,
        user_id: str,
        group_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[ContributionORM]:
        return await savings.get_user_contributions(self._db, user_id, group_id=group_id, limit=limit)

    async def list_loans(self, user_id: str) -> Sequence[LoanORM]:
        return await loans.get_user_loans(self._db, user_id)

    async def list_escrow_transactions(
        self, user_id: str, limit: Optional[int] = None
    ) -> Sequence[EscrowTransactionORM]:
        return await escrow.get_user_escrow_transactions(self._db, user_id, limit=limit)

    async def list_complaints(
        self, user_id: str, limit: Optional[int] = None
    ) -> Sequence[ComplaintORM]:
        return await complaints.get_user_complaints(self._db, user_id, limit=limit)

    async def join_group(self, invite_code: str, user_id: str) -> GroupORM:
        return await groups.join_group_by_invite_code(self._db, invite_code, user_id)

    async def create_group(self, name: str, admin_id: str) -> GroupORM:
        return await groups.create_group(self._db, name, admin_id)
