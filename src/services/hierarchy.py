"""
Referral hierarchy walks over an in-memory user list.

Both directions are pure functions: callers load the users once and
pass them in, nothing here touches the database.

- resolve_downline: everyone reporting to a user, directly or not
- resolve_upline: the commission chain from a salesman up to the root
"""

import logging
import warnings
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from src.services.errors import IntegrityWarning
from src.services.roles import capabilities_for

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 7


@dataclass
class Downline:
    ids: Set[int] = field(default_factory=set)
    users: list = field(default_factory=list)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self.ids

    def __len__(self) -> int:
        return len(self.ids)


def index_users(all_users: Iterable) -> Dict[int, object]:
    """Map user id to user."""
    return {user.id: user for user in all_users}


def report_integrity_gap(message: str) -> None:
    logger.warning(message)
    warnings.warn(message, IntegrityWarning, stacklevel=3)


def resolve_downline(user_id: int, all_users: Iterable) -> Downline:
    """
    Breadth-first walk over the inverse of referrer_id.

    Each descendant is visited once even if referrer links form a cycle;
    the starting user is never part of its own downline.
    """
    children: Dict[int, list] = {}
    for user in all_users:
        if user.referrer_id is not None:
            children.setdefault(user.referrer_id, []).append(user)

    downline = Downline()
    visited = {user_id}
    queue = deque([user_id])

    while queue:
        current_id = queue.popleft()
        for child in children.get(current_id, ()):
            if child.id in visited:
                continue
            visited.add(child.id)
            downline.ids.add(child.id)
            downline.users.append(child)
            queue.append(child.id)

    return downline


def walk_referrers(user, users_by_id: Dict[int, object], max_depth: int = DEFAULT_MAX_DEPTH) -> List:
    """
    The user followed by each referrer up to the root.

    Stops silently at a missing referrer, a cycle, or after max_depth hops.
    """
    chain = [user]
    seen = {user.id}
    current = user

    for _ in range(max_depth):
        referrer_id = current.referrer_id
        if referrer_id is None:
            return chain

        referrer = users_by_id.get(referrer_id)
        if referrer is None:
            report_integrity_gap(
                f"User {current.id} references missing referrer {referrer_id}; chain truncated"
            )
            return chain
        if referrer.id in seen:
            report_integrity_gap(f"Referrer cycle detected at user {referrer.id}; chain truncated")
            return chain

        chain.append(referrer)
        seen.add(referrer.id)
        current = referrer

    if current.referrer_id is not None:
        report_integrity_gap(
            f"Hierarchy above user {user.id} is deeper than {max_depth} hops; chain truncated"
        )
    return chain


def resolve_upline(
    user,
    all_users: Iterable,
    max_depth: int = DEFAULT_MAX_DEPTH,
    users_by_id: Optional[Dict[int, object]] = None,
) -> List:
    """
    Commission chain for a sale: the seller and its referrers, skipping
    roles that do not earn commission (the walk continues past them).
    """
    if users_by_id is None:
        users_by_id = index_users(all_users)
    return [
        member
        for member in walk_referrers(user, users_by_id, max_depth)
        if capabilities_for(member.role).commission_eligible
    ]
