"""
models/group.py — SQLAlchemy ORM models for thrift groups and memberships.

Tables: groups, group_members
"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wethrift.database import Base

MAX_GROUP_NAME_LENGTH = 120


class GroupORM(Base):
    """
    ORM model for a thrift group.

    invite_code: shared out-of-band; members join over USSD by typing it.
    current_members: denormalized count of active memberships.
    """
    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(MAX_GROUP_NAME_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    group_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="community",
        comment="community | formal | corporate",
    )
    admin_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    group_code: Mapped[str] = mapped_column(String(6), nullable=False, unique=True)
    invite_code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True, index=True)
    max_members: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    current_members: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("2.50"),
        comment="Default group commission percentage",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class GroupMemberORM(Base):
    """Membership of one user in one group."""
    __tablename__ = "group_members"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="member",
        comment="member | moderator | admin",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
        comment="active | removed",
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    group: Mapped[GroupORM] = relationship(lazy="joined")
