"""
services/groups.py — thrift group reads and membership changes.

Membership rules (from the group service of the web app):
  - only active groups can be joined, by invite code
  - a group accepts members until current_members reaches max_members
  - the creator of a group is its first member, with role 'admin'
"""
import logging
import secrets
import string
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wethrift.models.group import GroupMemberORM, GroupORM

logger = logging.getLogger(__name__)

GROUP_CODE_LENGTH = 6
INVITE_CODE_LENGTH = 10
DEFAULT_MAX_MEMBERS = 50
_CODE_ALPHABET = string.ascii_uppercase + string.digits


class GroupJoinError(ValueError):
    """Joining a group was refused. The message is safe to show to the member."""


def generate_code(length: int) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


async def get_user_groups(
    db: AsyncSession,
    user_id: str,
    limit: Optional[int] = None,
) -> Sequence[GroupORM]:
    """Active groups the member belongs to, most recently joined first."""
    stmt = (
        select(GroupORM)
        .join(GroupMemberORM, GroupMemberORM.group_id == GroupORM.id)
        .where(GroupMemberORM.user_id == user_id)
        .where(GroupMemberORM.status == "active")
        .where(GroupORM.is_active.is_(True))
        .order_by(GroupMemberORM.joined_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


async def _refresh_member_count(db: AsyncSession, group: GroupORM) -> None:
    count = await db.scalar(
        select(func.count())
        .select_from(GroupMemberORM)
        .where(GroupMemberORM.group_id == group.id)
        .where(GroupMemberORM.status == "active")
    )
    group.current_members = count or 0
    await db.flush()


async def join_group_by_invite_code(
    db: AsyncSession,
    invite_code: str,
    user_id: str,
) -> GroupORM:
    """
    Add the member to the active group owning `invite_code`.

    Raises:
        GroupJoinError: invalid code, member already in the group, or group full.
    """
    code = invite_code.strip().upper()
    group = (
        await db.execute(
            select(GroupORM)
            .where(GroupORM.invite_code == code)
            .where(GroupORM.is_active.is_(True))
        )
    ).scalar_one_or_none()
    if group is None:
        raise GroupJoinError("Invalid invite code")

    existing = (
        await db.execute(
            select(GroupMemberORM)
            .where(GroupMemberORM.group_id == group.id)
            .where(GroupMemberORM.user_id == user_id)
            .where(GroupMemberORM.status == "active")
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise GroupJoinError("You are already a member of this group")

    if group.current_members >= group.max_members:
        raise GroupJoinError("Group is full")

    db.add(GroupMemberORM(group_id=group.id, user_id=user_id, role="member", status="active"))
    await db.flush()
    await _refresh_member_count(db, group)
    logger.info("Member joined group group_id=%s user_id=%s", group.id, user_id)
    return group


async def create_group(
    db: AsyncSession,
    name: str,
    admin_id: str,
    description: Optional[str] = None,
    group_type: str = "community",
    max_members: int = DEFAULT_MAX_MEMBERS,
) -> GroupORM:
    """Create an active group with fresh codes and its creator as admin."""
    group = GroupORM(
        name=name.strip(),
        description=description,
        group_type=group_type,
        admin_id=admin_id,
        group_code=generate_code(GROUP_CODE_LENGTH),
        invite_code=generate_code(INVITE_CODE_LENGTH),
        max_members=max_members,
        current_members=1,
        is_active=True,
    )
    db.add(group)
    await db.flush()
    db.add(GroupMemberORM(group_id=group.id, user_id=admin_id, role="admin", status="active"))
    await db.flush()
    logger.info("Group created group_id=%s admin_id=%s", group.id, admin_id)
    return group
