"""
models/__init__.py — imports all ORM models so Alembic's env.py
sees them via Base.metadata when generating migrations.
"""
from wethrift.models.commission_rate import CommissionRateORM
from wethrift.models.complaint import ComplaintORM
from wethrift.models.contribution import ContributionORM
from wethrift.models.escrow import EscrowTransactionORM
from wethrift.models.group import GroupMemberORM, GroupORM
from wethrift.models.loan import LoanORM
from wethrift.models.user import UserORM
from wethrift.models.ussd_session import UssdSessionORM

__all__ = [
    "CommissionRateORM",
    "ComplaintORM",
    "ContributionORM",
    "EscrowTransactionORM",
    "GroupMemberORM",
    "GroupORM",
    "LoanORM",
    "UserORM",
    "UssdSessionORM",
]
