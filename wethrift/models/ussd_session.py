"""
models/ussd_session.py — SQLAlchemy ORM model for USSD dialog state.

Table: ussd_sessions

Dual-store pattern:
  - Redis (primary):    TTL-enforced live dialog state (fast, expires on its own)
  - PostgreSQL (here):  Durable copy, swept by the session sweeper once idle past the TTL

One row per gateway-assigned session id. Every turn overwrites the row.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from wethrift.database import Base


class UssdSessionORM(Base):
    """
    ORM model for one in-progress USSD dialog.

    context: Serialized SessionProgress (auth sub-flow or pending prompt).
             Never contains a PIN.
    """
    __tablename__ = "ussd_sessions"

    session_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Opaque session id assigned by the USSD gateway",
    )
    phone_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Dialing MSISDN as sent by the gateway",
    )
    menu_level: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="main",
        comment="Current MenuLevel value",
    )
    user_input: Mapped[str] = mapped_column(
        String(182),
        nullable=False,
        default="",
        comment="Latest raw keystroke string",
    )
    is_authenticated: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        comment="Set once USSD login succeeds",
    )
    group_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        nullable=True,
        comment="Selected group context",
    )
    context: Mapped[Optional[dict]] = mapped_column(
        JSONB,
        nullable=True,
        comment="SessionProgress tagged union. Must never contain a PIN.",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="Indexed for the idle-session sweep",
    )
