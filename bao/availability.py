# bao/availability.py
"""
Which operations can run right now, and why not.

evaluate_operation_availability() answers for every axiom key and every
sandbox key at once, given the forest and the current selection. An
operation is available only when its preview would change the forest; when
it is not, the reason names the first guard that failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from .core.form import ROUND, Form
from .axioms.inversion import FRAME, MARK, is_clarify_applicable
from .engine.dispatcher import (
    AXIOM_REASONS,
    FALLBACK_REASONS,
    LOAD_LEVEL_REASON,
    PARENT_MISMATCH_REASON,
    PARENT_STALE_REASON,
    SANDBOX_REASONS,
    SELECTION_STALE_REASON,
    changes_forest,
    is_axiom_allowed,
    operation_locked_reason,
    preview_operation,
)
from .engine.rewrite import index_forest
from .operations import (
    ALL_OPERATION_KEYS,
    OPERATION_AXIOMS,
    AddBoundary,
    Cancel,
    Clarify,
    Collect,
    Create,
    Disperse,
    Enfold,
)

IDLE = "idle"
PLAYING = "playing"
WON = "won"

# selecting this id as parent means "the root forest"
ROOT_NODE_ID = "__root__"

_SANDBOX_BOUNDARY_KEYS = {"addRound": "round", "addSquare": "square", "addAngle": "angle"}


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None


AvailabilityMap = Dict[str, Availability]


def evaluate_operation_availability(
    forest: Sequence[Form],
    selected_node_ids: Sequence[str] = (),
    selected_parent_id: Optional[str] = None,
    status: str = PLAYING,
    allowed_axioms: Optional[Sequence[str]] = None,
    allowed_operations: Optional[Sequence[str]] = None,
    sandbox_enabled: bool = False,
) -> AvailabilityMap:
    if status == IDLE:
        return {key: Availability(False, LOAD_LEVEL_REASON) for key in ALL_OPERATION_KEYS}

    result: AvailabilityMap = {key: Availability(False, FALLBACK_REASONS[key]) for key in ALL_OPERATION_KEYS}
    index = index_forest(forest)
    selection = list(selected_node_ids)
    parent_id = None if selected_parent_id == ROOT_NODE_ID else selected_parent_id

    def blocked(key: str, reason: str) -> bool:
        result[key] = Availability(False, reason)
        return True

    def guard_rules(key: str) -> bool:
        if allowed_operations and key not in allowed_operations:
            return blocked(key, operation_locked_reason(key))
        axiom = OPERATION_AXIOMS[key]
        if not is_axiom_allowed(allowed_axioms, axiom):
            return blocked(key, AXIOM_REASONS[axiom])
        return False

    def guard_parent(key: str) -> bool:
        if parent_id is not None and parent_id not in index:
            return blocked(key, PARENT_STALE_REASON)
        return False

    def guard_siblings(key: str) -> bool:
        if not selection:
            return False
        if any(fid not in index for fid in selection):
            return blocked(key, SELECTION_STALE_REASON)
        if len({index[fid][1] for fid in selection}) > 1:
            return blocked(key, PARENT_MISMATCH_REASON)
        return False

    def try_preview(key: str, op) -> None:
        outcome = preview_operation(forest, op, allowed_axioms, allowed_operations)
        if changes_forest(forest, outcome):
            result[key] = Availability(True)

    # Clarify
    if not guard_rules("clarify"):
        first = selection[0] if selection else None
        if first is not None and first not in index:
            blocked("clarify", SELECTION_STALE_REASON)
        elif first is not None and is_clarify_applicable(index[first][0]):
            try_preview("clarify", Clarify(first))

    # Enfold
    for key, variant in (("enfoldFrame", FRAME), ("enfoldMark", MARK)):
        if guard_rules(key) or guard_parent(key) or guard_siblings(key):
            continue
        try_preview(key, Enfold(tuple(selection), variant=variant, parent_id=parent_id))

    # Disperse
    if not guard_rules("disperse") and not guard_parent("disperse"):
        try_preview("disperse", Disperse(tuple(selection), frame_id=parent_id))

    # Collect
    if not guard_rules("collect"):
        if any(fid in index and index[fid][0].boundary == ROUND for fid in selection):
            try_preview("collect", Collect(tuple(selection)))

    # Cancel
    if not guard_rules("cancel"):
        try_preview("cancel", Cancel(tuple(selection)))

    # Create
    if not guard_rules("create") and not guard_parent("create"):
        try_preview("create", Create(parent_id=parent_id, template_ids=tuple(selection)))

    # Sandbox
    for key in ("addRound", "addSquare", "addAngle", "addVariable"):
        if not sandbox_enabled:
            blocked(key, SANDBOX_REASONS[key])
            continue
        if guard_parent(key):
            continue
        if key == "addVariable":
            result[key] = Availability(True)
            continue
        if guard_siblings(key):
            continue
        try_preview(key, AddBoundary(tuple(selection), boundary=_SANDBOX_BOUNDARY_KEYS[key], parent_id=parent_id))

    return result


__all__ = [
    "Availability",
    "AvailabilityMap",
    "IDLE",
    "PLAYING",
    "WON",
    "ROOT_NODE_ID",
    "evaluate_operation_availability",
]
