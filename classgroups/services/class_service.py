# classgroups/services/class_service.py
"""
Business operations for classes, member registration and grouping.

Routers call these with an AsyncSession; domain functions do the pure work
and the repos do the persistence. Failures are raised as ClassGroupsError
subclasses.
"""
import logging
import secrets
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from classgroups.config.settings import settings
from classgroups.domain.grouping import create_groups
from classgroups.domain.models import ClassDTO, CreatedClassDTO, GroupDTO, MemberDTO
from classgroups.domain.validation import (
    as_int,
    constraints_from_class,
    validate_class_creation,
    validate_group_update,
    validate_member_registration,
)
from classgroups.infrastructure.models import Cohort, Group, Member
from classgroups.repositories.class_repos import (
    count_groups_repo,
    count_members_repo,
    create_class_repo,
    create_group_repo,
    create_member_repo,
    delete_group_repo,
    get_assigned_member_ids_repo,
    get_class_repo,
    get_distinct_locations_repo,
    get_distinct_sectors_repo,
    get_group_members_map_repo,
    get_group_repo,
    get_groups_repo,
    get_members_repo,
    get_members_with_groups_repo,
    mark_groups_created_repo,
    park_group_positions_repo,
    update_group_repo,
)
from classgroups.services.errors import BusinessRuleError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


# ----------------------------
# Helpers
# ----------------------------

def _is_admin(cohort: Cohort, admin_token: Optional[str]) -> bool:
    if not admin_token:
        return False
    # headers arrive latin-1 decoded; compare_digest rejects non-ASCII str
    return secrets.compare_digest(admin_token.encode(), cohort.admin_token.encode())


async def _require_class(db: AsyncSession, class_id: str) -> Cohort:
    cohort = await get_class_repo(db, class_id)
    if not cohort:
        raise NotFoundError("Class not found")
    return cohort


async def _require_admin(db: AsyncSession, class_id: str, admin_token: Optional[str]) -> Cohort:
    cohort = await _require_class(db, class_id)
    if not _is_admin(cohort, admin_token):
        raise UnauthorizedError()
    return cohort


def _member_dto(member: Member, group: Optional[Group] = None) -> MemberDTO:
    return MemberDTO(
        id=member.id,
        class_id=member.class_id,
        name=member.name,
        location=member.location,
        sector=member.sector,
        notes=member.notes,
        created_at=member.created_at,
        group_id=group.id if group else None,
        group_name=group.name if group else None,
    )


def _group_dto(group: Group, members: List[Member]) -> GroupDTO:
    return GroupDTO(
        id=group.id,
        class_id=group.class_id,
        name=group.name,
        position=group.position,
        created_at=group.created_at,
        members=[_member_dto(m) for m in members],
    )


def _strip(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) else None


# ----------------------------
# Class
# ----------------------------

async def create_class(db: AsyncSession, payload: Dict[str, Any]) -> CreatedClassDTO:
    validation = validate_class_creation(payload, settings.MAX_GROUPS_LIMIT)
    if not validation.valid:
        raise BusinessRuleError("Validation failed", details=validation.errors)

    cohort = await create_class_repo(
        db,
        name=payload["name"].strip(),
        max_groups=as_int(payload["max_groups"]),
        min_group_size=as_int(payload["min_group_size"]),
        max_group_size=as_int(payload["max_group_size"]),
    )
    logger.info(f"Created class {cohort.id} ({cohort.name!r})")
    return CreatedClassDTO(
        class_id=cohort.id,
        admin_token=cohort.admin_token,
        admin_url=f"/{cohort.id}/admin?token={cohort.admin_token}",
    )


async def get_class(db: AsyncSession, class_id: str, admin_token: Optional[str] = None) -> ClassDTO:
    """
    Class details with member/group counts.
    The admin token is only echoed back to a caller who already holds it.
    """
    cohort = await _require_class(db, class_id)
    is_admin = _is_admin(cohort, admin_token)
    return ClassDTO(
        id=cohort.id,
        name=cohort.name,
        max_groups=cohort.max_groups,
        min_group_size=cohort.min_group_size,
        max_group_size=cohort.max_group_size,
        created_at=cohort.created_at,
        groups_created=bool(cohort.groups_created),
        admin_token=cohort.admin_token if is_admin else None,
        is_admin=is_admin,
        member_count=await count_members_repo(db, class_id),
        group_count=await count_groups_repo(db, class_id),
    )


# ----------------------------
# Members
# ----------------------------

async def register_member(db: AsyncSession, class_id: str, payload: Dict[str, Any]) -> str:
    validation = validate_member_registration(payload)
    if not validation.valid:
        raise BusinessRuleError("Validation failed", details=validation.errors)

    cohort = await _require_class(db, class_id)
    if cohort.groups_created:
        raise BusinessRuleError("Cannot register members after groups have been created")

    member = await create_member_repo(
        db,
        class_id=class_id,
        name=payload["name"].strip(),
        location=payload["location"].strip(),
        sector=payload["sector"].strip(),
        notes=_strip(payload.get("notes")) or None,
    )
    return member.id


async def list_members(db: AsyncSession, class_id: str) -> List[MemberDTO]:
    await _require_class(db, class_id)
    rows = await get_members_with_groups_repo(db, class_id)
    return [_member_dto(member, group) for member, group in rows]


async def autocomplete(db: AsyncSession, class_id: str) -> Dict[str, List[str]]:
    """Distinct sectors and locations already used in the class."""
    await _require_class(db, class_id)
    return {
        "sectors": await get_distinct_sectors_repo(db, class_id),
        "locations": await get_distinct_locations_repo(db, class_id),
    }


# ----------------------------
# Groups
# ----------------------------

async def list_groups(db: AsyncSession, class_id: str) -> List[GroupDTO]:
    await _require_class(db, class_id)
    groups = await get_groups_repo(db, class_id)
    members_by_group = await get_group_members_map_repo(db, [g.id for g in groups])
    return [_group_dto(g, members_by_group[g.id]) for g in groups]


async def auto_create_groups(db: AsyncSession, class_id: str, admin_token: Optional[str]) -> List[GroupDTO]:
    """
    Run the grouping engine once for a class and store the result.

    Only members not already in a (manually created) group take part.
    After this the class is closed for registration and further auto runs.
    """
    cohort = await _require_admin(db, class_id, admin_token)
    if cohort.groups_created:
        raise BusinessRuleError("Groups have already been created for this class")

    assigned = await get_assigned_member_ids_repo(db, class_id)
    members = [m for m in await get_members_repo(db, class_id) if m.id not in assigned]
    if not members:
        raise BusinessRuleError("No members to group")

    constraints = constraints_from_class(
        cohort.max_groups, cohort.min_group_size, cohort.max_group_size
    )
    results = create_groups(members, constraints)

    over = [r.name for r in results if r.over_capacity]
    if over:
        logger.warning(
            f"Class {class_id}: {', '.join(over)} exceed max group size {cohort.max_group_size}"
        )

    existing = await get_groups_repo(db, class_id)
    offset = max((g.position for g in existing), default=0)

    created = []
    try:
        for index, result in enumerate(results, start=1):
            grp = await create_group_repo(
                db,
                class_id=class_id,
                name=result.name,
                position=offset + index,
                member_ids=[m.id for m in result.members],
                commit=False,
            )
            created.append((grp, result.members))
        await mark_groups_created_repo(db, class_id, commit=False)
        await db.commit()
    except Exception:
        logger.exception(f"Auto grouping failed for class {class_id}")
        await db.rollback()
        raise

    logger.info(f"Class {class_id}: grouped {len(members)} members into {len(results)} groups")
    return [_group_dto(grp, group_members) for grp, group_members in created]


async def create_manual_group(
    db: AsyncSession, class_id: str, admin_token: Optional[str], payload: Dict[str, Any]
) -> GroupDTO:
    cohort = await _require_admin(db, class_id, admin_token)

    name = _strip(payload.get("name"))
    if not name:
        raise BusinessRuleError("Group name is required")

    member_ids = payload.get("member_ids")
    if not isinstance(member_ids, list) or not member_ids:
        raise BusinessRuleError("At least one member must be selected")
    if not all(isinstance(mid, str) for mid in member_ids):
        raise BusinessRuleError("Member IDs must be strings")
    if len(set(member_ids)) != len(member_ids):
        raise BusinessRuleError("A member cannot be selected twice")
    if len(member_ids) < cohort.min_group_size:
        raise BusinessRuleError(f"Group must have at least {cohort.min_group_size} members")
    if len(member_ids) > cohort.max_group_size:
        raise BusinessRuleError(f"Group cannot exceed {cohort.max_group_size} members")

    members = {m.id: m for m in await get_members_repo(db, class_id)}
    if any(mid not in members for mid in member_ids):
        raise BusinessRuleError("Some member IDs are invalid or do not belong to this class")

    assigned = await get_assigned_member_ids_repo(db, class_id)
    if any(mid in assigned for mid in member_ids):
        raise BusinessRuleError("Some members are already assigned to other groups")

    existing = await get_groups_repo(db, class_id)
    position = max((g.position for g in existing), default=0) + 1

    grp = await create_group_repo(db, class_id, name, position, member_ids)
    return _group_dto(grp, [members[mid] for mid in member_ids])


async def update_groups(
    db: AsyncSession, class_id: str, admin_token: Optional[str], payload: Dict[str, Any]
):
    """Rewrite names, positions and memberships of the listed groups."""
    cohort = await _require_admin(db, class_id, admin_token)

    validation = validate_group_update(payload, cohort.min_group_size, cohort.max_group_size)
    if not validation.valid:
        raise BusinessRuleError("Validation failed", details=validation.errors)

    updates = payload["groups"]
    existing = {g.id: g for g in await get_groups_repo(db, class_id)}
    group_ids = [g["id"] for g in updates]
    if any(gid not in existing for gid in group_ids):
        raise BusinessRuleError("Some group IDs are invalid or do not belong to this class")
    if len(set(group_ids)) != len(group_ids):
        raise BusinessRuleError("A group cannot be listed twice")

    untouched_positions = [g.position for gid, g in existing.items() if gid not in group_ids]
    positions = [as_int(g["position"]) for g in updates] + untouched_positions
    if len(set(positions)) != len(positions):
        raise BusinessRuleError("Group positions must be unique")

    all_member_ids = [mid for g in updates for mid in g["member_ids"]]
    class_member_ids = {m.id for m in await get_members_repo(db, class_id)}
    if any(mid not in class_member_ids for mid in all_member_ids):
        raise BusinessRuleError("Some member IDs are invalid or do not belong to this class")
    if len(set(all_member_ids)) != len(all_member_ids):
        raise BusinessRuleError("A member cannot be assigned to multiple groups")

    # members held by groups outside this update stay where they are
    untouched_ids = [gid for gid in existing if gid not in group_ids]
    held = await get_group_members_map_repo(db, untouched_ids)
    held_ids = {m.id for members in held.values() for m in members}
    if any(mid in held_ids for mid in all_member_ids):
        raise BusinessRuleError("Some members are already assigned to other groups")

    try:
        await park_group_positions_repo(db, group_ids)
        for g in updates:
            await update_group_repo(db, g["id"], g["name"].strip(), as_int(g["position"]), g["member_ids"])
        await db.commit()
    except Exception:
        logger.exception(f"Updating groups failed for class {class_id}")
        await db.rollback()
        raise


async def delete_group(db: AsyncSession, class_id: str, admin_token: Optional[str], group_id: str):
    await _require_admin(db, class_id, admin_token)
    grp = await get_group_repo(db, class_id, group_id)
    if not grp:
        raise NotFoundError("Group not found or does not belong to this class")
    await delete_group_repo(db, group_id)
