# classgroups/domain/grouping.py
"""
Pure grouping logic for class members.

Members are bucketed by sector, then by location inside each sector, and the
resulting subgroups are packed into groups that honor the class constraints.
No DB access here: callers pass plain member records and get GroupResult
objects back.

Pipeline:
- _group_by_sector
- _group_by_location
- _balance_groups (bin packing + overflow distribution)
- _rebalance (fold undersized groups into valid ones)
- naming ("Group 1", "Group 2", ...)
"""
import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, Generic, List, Protocol, TypeVar

logger = logging.getLogger(__name__)


class GroupableMember(Protocol):
    id: str
    sector: str
    location: str


M = TypeVar("M", bound=GroupableMember)


@dataclass(frozen=True)
class GroupConstraints:
    max_groups: int
    min_group_size: int
    max_group_size: int


@dataclass
class GroupResult(Generic[M]):
    name: str
    members: List[M] = field(default_factory=list)
    over_capacity: bool = False


def normalize_key(value: str) -> str:
    return (value or "").strip().lower()


def create_groups(members: List[M], constraints: GroupConstraints) -> List[GroupResult[M]]:
    """
    Split class members into named groups.
    Priority: sector first, then location within sectors.

    Any object with id, sector and location attributes is accepted; the
    records are returned untouched (original casing kept).

    Example:
    >>> a = SimpleNamespace(id="1", sector="Tech", location="Accra")
    >>> b = SimpleNamespace(id="2", sector="tech ", location="accra")
    >>> [g.name for g in create_groups([a, b], GroupConstraints(10, 1, 6))]
    ['Group 1']
    """
    if not members:
        return []

    # too small to split at all
    if len(members) < constraints.min_group_size:
        return [GroupResult(
            name="Group 1",
            members=list(members),
            over_capacity=len(members) > constraints.max_group_size,
        )]

    sector_map = _group_by_sector(members)
    subgroups = _group_by_location(sector_map)
    packed = _balance_groups(subgroups, constraints)
    final = _rebalance(packed, constraints)

    results = [
        GroupResult(
            name=f"Group {index + 1}",
            members=group,
            over_capacity=len(group) > constraints.max_group_size,
        )
        for index, group in enumerate(final)
        if group
    ]
    logger.debug(
        "grouped %d members: %d subgroups -> %d groups",
        len(members), len(subgroups), len(results),
    )
    return results


def _group_by_sector(members: List[M]) -> Dict[str, List[M]]:
    # dicts keep first-insertion order
    sector_map: Dict[str, List[M]] = {}
    for member in members:
        sector_map.setdefault(normalize_key(member.sector), []).append(member)
    return sector_map


def _group_by_location(sector_map: Dict[str, List[M]]) -> List[List[M]]:
    """Each sector-location combination becomes one subgroup."""
    subgroups: List[List[M]] = []
    for sector_members in sector_map.values():
        location_map: Dict[str, List[M]] = {}
        for member in sector_members:
            location_map.setdefault(normalize_key(member.location), []).append(member)
        subgroups.extend(location_map.values())
    return subgroups


def _balance_groups(subgroups: List[List[M]], constraints: GroupConstraints) -> List[List[M]]:
    """
    Greedy first-fit packing of whole subgroups, largest first.
    Once max_groups is reached, a subgroup that fits nowhere is spread
    member by member over the smallest groups.
    """
    ordered = sorted(subgroups, key=len, reverse=True)  # sorted() is stable

    groups: List[List[M]] = []
    for subgroup in ordered:
        if not groups:
            groups.append(list(subgroup))
            continue

        target = next(
            (g for g in groups if len(g) + len(subgroup) <= constraints.max_group_size),
            None,
        )
        if target is not None:
            target.extend(subgroup)
        elif len(groups) < constraints.max_groups:
            groups.append(list(subgroup))
        else:
            _distribute_members(subgroup, groups, constraints.max_group_size)

    return groups


def _distribute_members(members: List[M], groups: List[List[M]], max_group_size: int) -> None:
    """
    Place members one at a time into the currently smallest group.

    Groups are tracked in a heap keyed by (size, index) so ties always go to
    the group created first. A group at max_group_size is skipped; if every
    group is full the member still goes to the smallest one, so nobody is
    dropped.
    """
    if not groups:
        return

    heap = [(len(g), i) for i, g in enumerate(groups)]
    heapq.heapify(heap)

    for member in members:
        size, index = heap[0]
        if size >= max_group_size:
            logger.warning(
                "no group below max size %d, placing member %s over capacity in group %d",
                max_group_size, getattr(member, "id", member), index + 1,
            )
        groups[index].append(member)
        heapq.heapreplace(heap, (size + 1, index))


def _rebalance(groups: List[List[M]], constraints: GroupConstraints) -> List[List[M]]:
    """Fold members of groups below min_group_size into the valid groups."""
    valid: List[List[M]] = []
    orphans: List[M] = []

    for group in groups:
        if len(group) >= constraints.min_group_size:
            valid.append(group)
        else:
            orphans.extend(group)

    # nothing reached the minimum anywhere
    if not valid and orphans:
        return [orphans]

    if orphans:
        _distribute_members(orphans, valid, constraints.max_group_size)

    return [g for g in valid if g]
