"""initial_schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000 UTC

Creates the USSD dialog table and the thrift tables the menus read:
  - ussd_sessions        (one row per gateway dialog, SessionProgress as JSONB)
  - users                (member lookup by phone + USSD PIN hash)
  - groups, group_members
  - contributions, loans, escrow_transactions, complaints
  - commission_rates     (commission tiers, group-specific or platform-wide)
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), nullable=False)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    # --- ussd_sessions table ---
    op.create_table(
        "ussd_sessions",
        sa.Column("session_id", sa.String(length=64), nullable=False, comment="Opaque session id assigned by the USSD gateway"),
        sa.Column("phone_number", sa.String(length=20), nullable=False, comment="Dialing MSISDN as sent by the gateway"),
        sa.Column("menu_level", sa.String(length=20), nullable=False, comment="Current MenuLevel value"),
        sa.Column("user_input", sa.String(length=182), nullable=False, comment="Latest raw keystroke string"),
        sa.Column("is_authenticated", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True, comment="Set once USSD login succeeds"),
        sa.Column("group_id", sa.String(length=36), nullable=True, comment="Selected group context"),
        sa.Column("context", postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment="SessionProgress tagged union. Must never contain a PIN."),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, comment="Indexed for the idle-session sweep"),
        sa.PrimaryKeyConstraint("session_id"),
    )
    op.create_index(op.f("ix_ussd_sessions_updated_at"), "ussd_sessions", ["updated_at"], unique=False)

    # --- users table ---
    op.create_table(
        "users",
        _id(),
        sa.Column("phone", sa.String(length=20), nullable=False, comment="Nigerian MSISDN in whichever spelling the member registered with"),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, comment="user | group_admin | admin | super_admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("ussd_pin_hash", sa.String(length=255), nullable=True, comment="pbkdf2_sha256$iterations$salt$hash"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_phone"), "users", ["phone"], unique=False)

    # --- groups table ---
    op.create_table(
        "groups",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("group_type", sa.String(length=20), nullable=False, comment="community | formal | corporate"),
        sa.Column("admin_id", sa.String(length=36), nullable=False),
        sa.Column("group_code", sa.String(length=6), nullable=False),
        sa.Column("invite_code", sa.String(length=10), nullable=False),
        sa.Column("max_members", sa.Integer(), nullable=False),
        sa.Column("current_members", sa.Integer(), nullable=False),
        sa.Column("commission_rate", sa.Numeric(5, 2), nullable=False, comment="Default group commission percentage"),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_code"),
    )
    op.create_index(op.f("ix_groups_admin_id"), "groups", ["admin_id"], unique=False)
    op.create_index(op.f("ix_groups_invite_code"), "groups", ["invite_code"], unique=True)

    # --- group_members table ---
    op.create_table(
        "group_members",
        _id(),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, comment="member | moderator | admin"),
        sa.Column("status", sa.String(length=20), nullable=False, comment="active | removed"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_group_members_group_id"), "group_members", ["group_id"], unique=False)
    op.create_index(op.f("ix_group_members_user_id"), "group_members", ["user_id"], unique=False)

    # --- contributions table ---
    op.create_table(
        "contributions",
        _id(),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("savings_product_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, comment="pending | completed | failed | cancelled"),
        sa.Column("transaction_reference", sa.String(length=40), nullable=True),
        sa.Column("commission_earned", sa.Numeric(14, 2), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contributions_user_id"), "contributions", ["user_id"], unique=False)
    op.create_index(op.f("ix_contributions_group_id"), "contributions", ["group_id"], unique=False)

    # --- loans table ---
    op.create_table(
        "loans",
        _id(),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("interest_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("duration_months", sa.Integer(), nullable=False),
        sa.Column("outstanding_balance", sa.Numeric(14, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_loans_user_id"), "loans", ["user_id"], unique=False)
    op.create_index(op.f("ix_loans_group_id"), "loans", ["group_id"], unique=False)

    # --- escrow_transactions table ---
    op.create_table(
        "escrow_transactions",
        _id(),
        sa.Column("buyer_id", sa.String(length=36), nullable=False),
        sa.Column("seller_id", sa.String(length=36), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, comment="pending | funded | released | disputed | cancelled"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_escrow_transactions_buyer_id"), "escrow_transactions", ["buyer_id"], unique=False)
    op.create_index(op.f("ix_escrow_transactions_seller_id"), "escrow_transactions", ["seller_id"], unique=False)

    # --- complaints table ---
    op.create_table(
        "complaints",
        _id(),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False, comment="transaction | service | technical | dispute | other"),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, comment="open | assigned | resolved | closed | escalated"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_complaints_user_id"), "complaints", ["user_id"], unique=False)

    # --- commission_rates table ---
    op.create_table(
        "commission_rates",
        _id(),
        sa.Column("group_id", sa.String(length=36), nullable=True),
        sa.Column("service_type", sa.String(length=20), nullable=False, comment="savings | loans | contributions | escrow | general"),
        sa.Column("rate_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("minimum_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("maximum_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_commission_rates_group_id"), "commission_rates", ["group_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_commission_rates_group_id"), table_name="commission_rates")
    op.drop_table("commission_rates")
    op.drop_index(op.f("ix_complaints_user_id"), table_name="complaints")
    op.drop_table("complaints")
    op.drop_index(op.f("ix_escrow_transactions_seller_id"), table_name="escrow_transactions")
    op.drop_index(op.f("ix_escrow_transactions_buyer_id"), table_name="escrow_transactions")
    op.drop_table("escrow_transactions")
    op.drop_index(op.f("ix_loans_group_id"), table_name="loans")
    op.drop_index(op.f("ix_loans_user_id"), table_name="loans")
    op.drop_table("loans")
    op.drop_index(op.f("ix_contributions_group_id"), table_name="contributions")
    op.drop_index(op.f("ix_contributions_user_id"), table_name="contributions")
    op.drop_table("contributions")
    op.drop_index(op.f("ix_group_members_user_id"), table_name="group_members")
    op.drop_index(op.f("ix_group_members_group_id"), table_name="group_members")
    op.drop_table("group_members")
    op.drop_index(op.f("ix_groups_invite_code"), table_name="groups")
    op.drop_index(op.f("ix_groups_admin_id"), table_name="groups")
    op.drop_table("groups")
    op.drop_index(op.f("ix_users_phone"), table_name="users")
    op.drop_table("users")
    op.drop_index(op.f("ix_ussd_sessions_updated_at"), table_name="ussd_sessions")
    op.drop_table("ussd_sessions")
