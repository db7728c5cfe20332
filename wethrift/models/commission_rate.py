"""
models/commission_rate.py — SQLAlchemy ORM model for commission tiers.

Table: commission_rates
group_id NULL marks a platform-wide default; a group-specific tier for the
same service type overrides it.
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from wethrift.database import Base


class CommissionRateORM(Base):
    """
    One commission tier.

    A tier applies to amounts in [minimum_amount, maximum_amount];
    maximum_amount NULL means unbounded.
    """
    __tablename__ = "commission_rates"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    group_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    service_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="savings | loans | contributions | escrow | general",
    )
    rate_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    minimum_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    maximum_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
