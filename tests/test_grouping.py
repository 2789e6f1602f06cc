# tests/test_grouping.py
import random
from dataclasses import dataclass

from classgroups.domain.grouping import GroupConstraints, create_groups


@dataclass(frozen=True)
class Trainee:
    id: str
    sector: str
    location: str
    name: str = ""


def make(prefix, count, sector, location):
    return [Trainee(f"{prefix}{i}", sector, location) for i in range(1, count + 1)]


def ids(group):
    return [m.id for m in group.members]


# -------------------------------
# Basic cases
# -------------------------------

def test_empty_class():
    assert create_groups([], GroupConstraints(5, 2, 4)) == []


def test_too_few_members_single_group():
    # 2 members, min size 3 -> one group anyway, input order kept
    members = [Trainee("b", "Tech", "Accra"), Trainee("a", "Health", "Tamale")]
    groups = create_groups(members, GroupConstraints(max_groups=4, min_group_size=3, max_group_size=6))
    assert len(groups) == 1
    assert groups[0].name == "Group 1"
    assert ids(groups[0]) == ["b", "a"]


def test_locations_of_one_sector_share_a_group():
    # 3 tech/accra + 3 tech/kumasi fit together (3 + 3 <= 6)
    members = make("acc", 3, "tech", "accra") + make("kum", 3, "tech", "kumasi")
    groups = create_groups(members, GroupConstraints(max_groups=10, min_group_size=3, max_group_size=6))
    assert len(groups) == 1
    assert ids(groups[0]) == ["acc1", "acc2", "acc3", "kum1", "kum2", "kum3"]


def test_normalized_keys_keep_original_casing():
    members = [
        Trainee("1", " Tech ", "ACCRA"),
        Trainee("2", "tech", " accra"),
        Trainee("3", "TECH", "Accra "),
    ]
    groups = create_groups(members, GroupConstraints(max_groups=3, min_group_size=1, max_group_size=3))
    assert len(groups) == 1
    assert groups[0].members == members
    assert groups[0].members[0].sector == " Tech "


def test_subgroup_order_follows_first_appearance():
    # sales/kumasi, sales/accra, tech/accra -> one subgroup each, same size
    members = [
        Trainee("m1", "Sales", "Kumasi"),
        Trainee("m2", "Tech", "Accra"),
        Trainee("m3", "Sales", "Accra"),
    ]
    groups = create_groups(members, GroupConstraints(max_groups=3, min_group_size=1, max_group_size=1))
    assert [g.name for g in groups] == ["Group 1", "Group 2", "Group 3"]
    assert [ids(g) for g in groups] == [["m1"], ["m3"], ["m2"]]


def test_largest_subgroup_packed_first():
    members = make("s", 1, "small", "x") + make("b", 4, "big", "x")
    groups = create_groups(members, GroupConstraints(max_groups=2, min_group_size=1, max_group_size=5))
    assert ids(groups[0]) == ["b1", "b2", "b3", "b4", "s1"]

# -------------------------------
# Overflow distribution
# -------------------------------

def test_ten_sectors_two_groups():
    members = [Trainee(str(i), f"sector-{i}", "same") for i in range(10)]
    groups = create_groups(members, GroupConstraints(max_groups=2, min_group_size=1, max_group_size=6))
    sizes = [len(g.members) for g in groups]
    assert len(groups) == 2
    assert sum(sizes) == 10
    assert all(1 <= s <= 6 for s in sizes)
    assert sizes == [6, 4]


def test_overflow_goes_member_by_member_to_smallest_group():
    # A3 and B3 open both groups; C2 fits nowhere whole and is split
    members = make("a", 3, "A", "x") + make("b", 3, "B", "x") + make("c", 2, "C", "x")
    groups = create_groups(members, GroupConstraints(max_groups=2, min_group_size=1, max_group_size=4))
    assert [ids(g) for g in groups] == [
        ["a1", "a2", "a3", "c1"],
        ["b1", "b2", "b3", "c2"],
    ]
    assert not any(g.over_capacity for g in groups)


def test_full_groups_take_overflow_instead_of_dropping():
    members = make("a", 2, "A", "x") + make("b", 1, "B", "x")
    groups = create_groups(members, GroupConstraints(max_groups=1, min_group_size=1, max_group_size=2))
    assert len(groups) == 1
    assert ids(groups[0]) == ["a1", "a2", "b1"]
    assert groups[0].over_capacity

# -------------------------------
# Rebalancing
# -------------------------------

def test_orphans_folded_into_valid_groups():
    # C2 gets its own group but is below min 3, so it is spread over A and B
    members = make("a", 3, "A", "x") + make("b", 3, "B", "x") + make("c", 2, "C", "x")
    groups = create_groups(members, GroupConstraints(max_groups=3, min_group_size=3, max_group_size=4))
    assert [g.name for g in groups] == ["Group 1", "Group 2"]
    assert [ids(g) for g in groups] == [
        ["a1", "a2", "a3", "c1"],
        ["b1", "b2", "b3", "c2"],
    ]


def test_all_orphans_become_one_group():
    members = make("a", 2, "A", "x") + make("b", 2, "B", "x")
    groups = create_groups(members, GroupConstraints(max_groups=2, min_group_size=3, max_group_size=3))
    assert len(groups) == 1
    assert groups[0].name == "Group 1"
    assert ids(groups[0]) == ["a1", "a2", "b1", "b2"]


def test_malformed_constraints_do_not_crash():
    members = make("a", 4, "A", "x") + make("b", 1, "B", "y")
    groups = create_groups(members, GroupConstraints(max_groups=1, min_group_size=3, max_group_size=1))
    assert sorted(m.id for g in groups for m in g.members) == ["a1", "a2", "a3", "a4", "b1"]

# -------------------------------
# Properties over generated classes
# -------------------------------

SECTORS = ["Tech", "health", "Agric ", "finance", "EDUCATION"]
LOCATIONS = ["Accra", "kumasi", "Tamale", " Ho"]


def random_class(rng, size):
    return [
        Trainee(f"m{i}", rng.choice(SECTORS), rng.choice(LOCATIONS))
        for i in range(size)
    ]


def test_generated_classes_hold_invariants():
    rng = random.Random(7)
    for _ in range(200):
        members = random_class(rng, rng.randint(1, 60))
        min_size = rng.randint(1, 6)
        constraints = GroupConstraints(
            max_groups=rng.randint(1, 12),
            min_group_size=min_size,
            max_group_size=rng.randint(min_size, 10),
        )
        groups = create_groups(members, constraints)

        placed = [m.id for g in groups for m in g.members]
        assert sorted(placed) == sorted(m.id for m in members)
        assert 1 <= len(groups) <= constraints.max_groups
        assert [g.name for g in groups] == [f"Group {i}" for i in range(1, len(groups) + 1)]
        for g in groups:
            assert g.over_capacity == (len(g.members) > constraints.max_group_size)
            if len(groups) > 1:
                assert len(g.members) >= constraints.min_group_size


def test_same_input_same_output():
    rng = random.Random(42)
    members = random_class(rng, 45)
    constraints = GroupConstraints(max_groups=6, min_group_size=4, max_group_size=9)
    first = create_groups(members, constraints)
    second = create_groups(list(members), constraints)
    assert [(g.name, ids(g)) for g in first] == [(g.name, ids(g)) for g in second]


def test_too_few_members_flags_over_capacity():
    # min above max: the single fallback group is still checked against max
    members = make("a", 2, "A", "x")
    groups = create_groups(members, GroupConstraints(max_groups=2, min_group_size=3, max_group_size=1))
    assert len(groups) == 1
    assert ids(groups[0]) == ["a1", "a2"]
    assert groups[0].over_capacity
