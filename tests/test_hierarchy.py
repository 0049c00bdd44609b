"""
Tests for the referral hierarchy walks.

Covers:
- resolve_downline: BFS, no revisits, cycles
- resolve_upline: root, missing links, cycles, depth limit,
  skipping roles that earn no commission
"""

import pytest

from src.models import UserRole
from src.services.errors import IntegrityWarning
from src.services.hierarchy import index_users, resolve_downline, resolve_upline, walk_referrers

from factories import make_node


def _tree():
    # 1 RD
    # ├── 2 TOM
    # │   ├── 4 Salesman
    # │   └── 5 Salesman
    # └── 3 TOM
    #     └── 6 Salesman
    return [
        make_node(1, UserRole.REGIONAL_DIRECTOR),
        make_node(2, UserRole.TEAM_OPERATION_MANAGER, referrer_id=1),
        make_node(3, UserRole.TEAM_OPERATION_MANAGER, referrer_id=1),
        make_node(4, referrer_id=2),
        make_node(5, referrer_id=2),
        make_node(6, referrer_id=3),
    ]


class TestResolveDownline:
    def test_whole_tree(self):
        downline = resolve_downline(1, _tree())
        assert downline.ids == {2, 3, 4, 5, 6}
        assert len(downline) == 5

    def test_breadth_first_order(self):
        ids = [u.id for u in resolve_downline(1, _tree()).users]
        assert ids[:2] == [2, 3]

    def test_subtree(self):
        assert resolve_downline(2, _tree()).ids == {4, 5}

    def test_leaf_has_empty_downline(self):
        downline = resolve_downline(6, _tree())
        assert downline.ids == set()
        assert downline.users == []

    def test_unknown_user(self):
        assert resolve_downline(99, _tree()).ids == set()

    def test_cycle_visits_each_user_once(self):
        users = [
            make_node(1, UserRole.TEAM_OPERATION_MANAGER, referrer_id=3),
            make_node(2, referrer_id=1),
            make_node(3, referrer_id=2),
        ]
        downline = resolve_downline(1, users)
        assert downline.ids == {2, 3}
        assert 1 not in downline
        assert len(downline.users) == 2


class TestResolveUpline:
    def test_root_user(self):
        users = _tree()
        assert resolve_upline(users[0], users) == [users[0]]

    def test_full_chain(self):
        users = _tree()
        chain = resolve_upline(users[3], users)
        assert [u.id for u in chain] == [4, 2, 1]

    def test_missing_referrer_truncates(self):
        users = [make_node(1, referrer_id=42)]
        with pytest.warns(IntegrityWarning):
            chain = resolve_upline(users[0], users)
        assert [u.id for u in chain] == [1]

    def test_cycle_stops(self):
        users = [
            make_node(1, referrer_id=2),
            make_node(2, UserRole.TEAM_OPERATION_MANAGER, referrer_id=1),
        ]
        with pytest.warns(IntegrityWarning):
            chain = resolve_upline(users[0], users)
        assert [u.id for u in chain] == [1, 2]

    def test_depth_limit(self):
        users = [make_node(1)] + [
            make_node(i, UserRole.TEAM_OPERATION_MANAGER, referrer_id=i + 1) for i in range(2, 12)
        ]
        users[0].referrer_id = 2
        users.append(make_node(12, UserRole.REGIONAL_DIRECTOR))
        with pytest.warns(IntegrityWarning):
            chain = walk_referrers(users[0], index_users(users), max_depth=3)
        assert [u.id for u in chain] == [1, 2, 3, 4]

    def test_depth_limit_exact_root_no_warning(self):
        users = [
            make_node(1, referrer_id=2),
            make_node(2, UserRole.TEAM_OPERATION_MANAGER, referrer_id=3),
            make_node(3, UserRole.REGIONAL_DIRECTOR),
        ]
        chain = walk_referrers(users[0], index_users(users), max_depth=2)
        assert [u.id for u in chain] == [1, 2, 3]

    def test_skips_non_commission_roles_and_continues(self):
        users = [
            make_node(1, referrer_id=2),
            make_node(2, UserRole.DELIVERY_BOY, referrer_id=3),
            make_node(3, UserRole.REGIONAL_DIRECTOR),
        ]
        chain = resolve_upline(users[0], users)
        assert [u.id for u in chain] == [1, 3]
