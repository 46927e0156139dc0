# bao/win.py
"""
Win detection: order-invariant structural comparison of forests.

Ids and sibling order never matter; the goal must be matched exactly, with
no subset or superset matching.
"""

from __future__ import annotations

from typing import Sequence

from .core.form import Form, canonical_signature, canonical_signature_forest


def forms_equivalent(left: Form, right: Form) -> bool:
    return canonical_signature(left) == canonical_signature(right)


def forests_equivalent(left: Sequence[Form], right: Sequence[Form]) -> bool:
    if len(left) != len(right):
        return False
    return canonical_signature_forest(left) == canonical_signature_forest(right)


def check_win_condition(current: Sequence[Form], goal: Sequence[Form]) -> bool:
    """True iff the current forest is structurally the goal forest."""
    return forests_equivalent(current, goal)
