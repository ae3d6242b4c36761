"""Action set coverage and level ranking."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from functools import cmp_to_key

from grantlens.calculator.models import IncomparableActionsError


def fully_covers(candidate: Iterable[str], required: Iterable[str]) -> bool:
    """Return True if every required action is present in *candidate*."""
    return set(required).issubset(candidate)


def compare_actions(left: Iterable[str], right: Iterable[str]) -> int:
    """Order two action sets by permissiveness.

    Returns -1 when *left* strictly covers *right*, 1 when *right* strictly
    covers *left*, and 0 when they grant the same actions.
    """
    left_set, right_set = frozenset(left), frozenset(right)
    left_covers = fully_covers(left_set, right_set)
    right_covers = fully_covers(right_set, left_set)
    if left_covers and right_covers:
        return 0
    if not left_covers and not right_covers:
        raise IncomparableActionsError(left_set, right_set)
    return -1 if left_covers else 1


def rank_levels(levels: Iterable[str], actions_for: Callable[[str], frozenset[str]]) -> list[str]:
    """Sort *levels* from most to least permissive. Stable for equal sets."""
    actions = {level: actions_for(level) for level in levels}
    return sorted(
        actions,
        key=cmp_to_key(lambda a, b: compare_actions(actions[a], actions[b])),
    )
