from typing import Iterable, Set
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.group import Group
from app.models.group_member import GroupMember
from app.models.enums import MemberRole, MemberStatus
from app.core.exceptions import NotFoundError

async def get_group(db: AsyncSession, group_id: int) -> Group:
    res = await db.execute(select(Group).where(Group.id == group_id))
    group = res.scalar_one_or_none()

    if not group:
        raise NotFoundError(f"Group {group_id} not found", field="group_id")

    return group

async def is_active_member(db: AsyncSession, group_id: int, user_id: int) -> bool:
    q = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.status == MemberStatus.ACTIVE,
    )
    res = await db.execute(q)
    return res.scalar_one_or_none() is not None

async def is_admin(db: AsyncSession, group_id: int, user_id: int) -> bool:
    q = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.role == MemberRole.ADMIN,
        GroupMember.status == MemberStatus.ACTIVE,
    )
    res = await db.execute(q)
    return res.scalar_one_or_none() is not None

async def active_members_among(db: AsyncSession, group_id: int, user_ids: Iterable[int]) -> Set[int]:
    ids = list(user_ids)
    if not ids:
        return set()
    q = select(GroupMember.user_id).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id.in_(ids),
        GroupMember.status == MemberStatus.ACTIVE,
    )
    res = await db.execute(q)
    return set(res.scalars().all())
