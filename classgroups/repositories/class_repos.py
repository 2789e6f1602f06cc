# classgroups/repositories/class_repos.py
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from classgroups.infrastructure.ids import (
    generate_admin_token,
    generate_class_id,
    generate_group_id,
    generate_group_member_id,
    generate_member_id,
)
from classgroups.infrastructure.models import Cohort, Group, GroupMember, Member

# ----------------------------
# Class
# ----------------------------

async def create_class_repo(
    db: AsyncSession,
    name: str,
    max_groups: int,
    min_group_size: int,
    max_group_size: int,
) -> Cohort:
    cohort = Cohort(
        id=generate_class_id(),
        name=name,
        max_groups=max_groups,
        min_group_size=min_group_size,
        max_group_size=max_group_size,
        admin_token=generate_admin_token(),
        groups_created=False,
    )
    db.add(cohort)
    await db.commit()
    await db.refresh(cohort)
    return cohort


async def get_class_repo(db: AsyncSession, class_id: str) -> Optional[Cohort]:
    result = await db.execute(select(Cohort).where(Cohort.id == class_id))
    return result.scalars().first()


async def mark_groups_created_repo(db: AsyncSession, class_id: str, commit: bool = True):
    await db.execute(
        update(Cohort).where(Cohort.id == class_id).values(groups_created=True)
    )
    if commit:
        await db.commit()


async def count_members_repo(db: AsyncSession, class_id: str) -> int:
    result = await db.execute(
        select(func.count(Member.id)).where(Member.class_id == class_id)
    )
    return result.scalar_one()


async def count_groups_repo(db: AsyncSession, class_id: str) -> int:
    result = await db.execute(
        select(func.count(Group.id)).where(Group.class_id == class_id)
    )
    return result.scalar_one()

# ----------------------------
# Member
# ----------------------------

async def create_member_repo(
    db: AsyncSession,
    class_id: str,
    name: str,
    location: str,
    sector: str,
    notes: Optional[str] = None,
) -> Member:
    next_seq = await db.execute(
        select(func.coalesce(func.max(Member.seq), 0) + 1).where(Member.class_id == class_id)
    )
    member = Member(
        id=generate_member_id(),
        seq=next_seq.scalar_one(),
        class_id=class_id,
        name=name,
        location=location,
        sector=sector,
        notes=notes,
    )
    db.add(member)
    await db.commit()
    await db.refresh(member)
    return member


async def get_members_repo(db: AsyncSession, class_id: str) -> List[Member]:
    """All members of a class in registration order."""
    result = await db.execute(
        select(Member).where(Member.class_id == class_id).order_by(Member.seq, Member.created_at)
    )
    return list(result.scalars().all())


async def get_members_with_groups_repo(
    db: AsyncSession, class_id: str
) -> List[Tuple[Member, Optional[Group]]]:
    result = await db.execute(
        select(Member, Group)
        .outerjoin(GroupMember, GroupMember.member_id == Member.id)
        .outerjoin(Group, Group.id == GroupMember.group_id)
        .where(Member.class_id == class_id)
        .order_by(Member.seq, Member.created_at)
    )
    return [(row[0], row[1]) for row in result.all()]


async def get_distinct_sectors_repo(db: AsyncSession, class_id: str) -> List[str]:
    result = await db.execute(
        select(Member.sector).where(Member.class_id == class_id).distinct().order_by(Member.sector)
    )
    return list(result.scalars().all())


async def get_distinct_locations_repo(db: AsyncSession, class_id: str) -> List[str]:
    result = await db.execute(
        select(Member.location).where(Member.class_id == class_id).distinct().order_by(Member.location)
    )
    return list(result.scalars().all())

# ----------------------------
# Group
# ----------------------------

async def create_group_repo(
    db: AsyncSession,
    class_id: str,
    name: str,
    position: int,
    member_ids: Sequence[str],
    commit: bool = True,
) -> Group:
    grp = Group(id=generate_group_id(), class_id=class_id, name=name, position=position)
    db.add(grp)
    await db.flush()
    await add_group_members_repo(db, grp.id, member_ids)
    if commit:
        await db.commit()
        await db.refresh(grp)
    return grp


async def add_group_members_repo(db: AsyncSession, group_id: str, member_ids: Sequence[str]):
    for seq, member_id in enumerate(member_ids, start=1):
        db.add(GroupMember(
            id=generate_group_member_id(),
            seq=seq,
            group_id=group_id,
            member_id=member_id,
        ))
    await db.flush()


async def get_group_repo(db: AsyncSession, class_id: str, group_id: str) -> Optional[Group]:
    result = await db.execute(
        select(Group).where(Group.id == group_id, Group.class_id == class_id)
    )
    return result.scalars().first()


async def get_groups_repo(db: AsyncSession, class_id: str) -> List[Group]:
    result = await db.execute(
        select(Group).where(Group.class_id == class_id).order_by(Group.position)
    )
    return list(result.scalars().all())


async def get_group_members_map_repo(
    db: AsyncSession, group_ids: Sequence[str]
) -> Dict[str, List[Member]]:
    """group_id -> members in their in-group order."""
    members_by_group: Dict[str, List[Member]] = {gid: [] for gid in group_ids}
    if not group_ids:
        return members_by_group
    result = await db.execute(
        select(GroupMember.group_id, Member)
        .join(Member, Member.id == GroupMember.member_id)
        .where(GroupMember.group_id.in_(list(group_ids)))
        .order_by(GroupMember.group_id, GroupMember.seq)
    )
    for group_id, member in result.all():
        members_by_group[group_id].append(member)
    return members_by_group


async def get_assigned_member_ids_repo(db: AsyncSession, class_id: str) -> set:
    result = await db.execute(
        select(GroupMember.member_id)
        .join(Group, Group.id == GroupMember.group_id)
        .where(Group.class_id == class_id)
    )
    return set(result.scalars().all())


async def park_group_positions_repo(db: AsyncSession, group_ids: Sequence[str]):
    """Move groups to negative positions so a reorder never hits the unique (class, position) index."""
    for index, group_id in enumerate(group_ids, start=1):
        await db.execute(update(Group).where(Group.id == group_id).values(position=-index))


async def update_group_repo(
    db: AsyncSession,
    group_id: str,
    name: str,
    position: int,
    member_ids: Sequence[str],
):
    """Rename/reposition a group and replace its memberships. Caller commits."""
    await db.execute(
        update(Group).where(Group.id == group_id).values(name=name, position=position)
    )
    await db.execute(delete(GroupMember).where(GroupMember.group_id == group_id))
    await add_group_members_repo(db, group_id, member_ids)


async def delete_group_repo(db: AsyncSession, group_id: str):
    # explicit: SQLite only cascades with PRAGMA foreign_keys=ON
    await db.execute(delete(GroupMember).where(GroupMember.group_id == group_id))
    await db.execute(delete(Group).where(Group.id == group_id))
    await db.commit()
