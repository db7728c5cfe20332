"""
models/user.py — SQLAlchemy ORM model for platform members.

Table: users
Only the columns the USSD channel and the services read are mapped here;
profile management lives in the web app.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from wethrift.database import Base


class UserORM(Base):
    """
    ORM model for a platform member.

    ussd_pin_hash: PBKDF2 hash of the 6-digit USSD PIN (see wethrift.security).
                   NULL means the member has not enabled USSD login.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Nigerian MSISDN in whichever spelling the member registered with",
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="user",
        comment="user | group_admin | admin | super_admin",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    ussd_pin_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="pbkdf2_sha256$iterations$salt$hash",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
