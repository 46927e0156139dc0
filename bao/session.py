# bao/session.py
"""
BAO GAME SESSION
================
The one owner of mutable game state:

    level         the loaded LevelDefinition (None while idle)
    current       the working forest
    goal          the goal forest
    status        idle / playing / won
    selection     selected node ids plus an optional selected parent
    past/future   undo and redo stacks of forest snapshots

Every commit pushes a clone of the previous forest onto `past` and clears
`future`. Undo and redo move clones between the stacks, so no snapshot ever
shares a node with the live forest. The selection is cleared after every
commit, undo and redo, and the win condition is re-checked each time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .availability import (
    IDLE,
    PLAYING,
    ROOT_NODE_ID,
    WON,
    Availability,
    evaluate_operation_availability,
)
from .core.form import Form, clone_forest
from .engine.dispatcher import (
    LOAD_LEVEL_REASON,
    SANDBOX_REASONS,
    changes_forest,
    explain_rejection,
    is_axiom_allowed,
    is_operation_allowed,
    preview_operation,
)
from .engine.rewrite import NOT_MODIFIED
from .levels.builtin import get_level
from .levels.types import LevelDefinition
from .operations import Operation, axiom_for, is_sandbox_operation, operation_key
from .trace import TraceObserver
from .win import check_win_condition

logger = logging.getLogger(__name__)

MOVE_LIMIT_REASON = "No moves left on this level. Undo or reset to continue."


@dataclass(frozen=True)
class OperationResult:
    applied: bool
    reason: Optional[str] = None


class GameSession:
    """
    Level state, selection and history behind a small method API.

        s = GameSession()
        s.load_level("level-01")
        s.apply_operation(Clarify(s.current[0].id))
        s.status  # "won"
    """

    def __init__(self, sandbox_enabled: bool = False, trace: Optional[bool] = None) -> None:
        self.level: Optional[LevelDefinition] = None
        self.current: List[Form] = []
        self.goal: List[Form] = []
        self.status: str = IDLE
        self.selected_node_ids: List[str] = []
        self.selected_parent_id: Optional[str] = None
        self.past: List[List[Form]] = []
        self.future: List[List[Form]] = []
        self.sandbox_enabled = sandbox_enabled
        self._trace = TraceObserver(enabled=trace)

    # ---------- level lifecycle ----------

    def load_level(self, level: Union[LevelDefinition, str]) -> None:
        """Load a LevelDefinition, or a registered level by id."""
        if isinstance(level, str):
            level = get_level(level)
        self.level = level
        self.current = clone_forest(level.start)
        self.goal = clone_forest(level.goal)
        self._clear_history()
        self._clear_all_selection()
        self.status = IDLE
        self._refresh_status()
        logger.info(f"Loaded level {level.id} ({level.name})")
        self._trace.level_loaded(level.id, self.current, self.goal)

    def reset_level(self) -> None:
        if self.level is None:
            return
        self.current = clone_forest(self.level.start)
        self.goal = clone_forest(self.level.goal)
        self._clear_history()
        self._clear_all_selection()
        self.status = IDLE
        self._refresh_status()
        self._trace.level_reset(self.level.id, self.current)

    # ---------- operations ----------

    def _allow_lists(self):
        if self.level is None:
            return None, None
        return self.level.allowed_axioms, self.level.allowed_operations

    def preview(self, op: Operation):
        """The forest `op` would produce, or NOT_MODIFIED. Never commits."""
        if self.status == IDLE:
            return NOT_MODIFIED
        if is_sandbox_operation(op) and not self.sandbox_enabled:
            return NOT_MODIFIED
        allowed_axioms, allowed_operations = self._allow_lists()
        return preview_operation(self.current, op, allowed_axioms, allowed_operations)

    def _reject(self, key: str, reason: str) -> OperationResult:
        logger.debug(f"{key} rejected: {reason}")
        self._trace.rejected(key, reason)
        return OperationResult(False, reason)

    def apply_operation(self, op: Operation) -> OperationResult:
        """
        Commit `op` if it changes the forest.

        Rejections (idle session, sandbox off, locked operation or axiom,
        move limit) and no-change results leave every piece of state as it
        was and report why.
        """
        key = operation_key(op)
        if self.status == IDLE:
            return self._reject(key, LOAD_LEVEL_REASON)
        if is_sandbox_operation(op) and not self.sandbox_enabled:
            return self._reject(key, SANDBOX_REASONS[key])

        allowed_axioms, allowed_operations = self._allow_lists()
        axiom = axiom_for(op)
        if not is_operation_allowed(allowed_operations, op) or (
            axiom is not None and not is_axiom_allowed(allowed_axioms, axiom)
        ):
            return self._reject(key, explain_rejection(
                self.current, op, allowed_axioms, allowed_operations, self.sandbox_enabled,
            ))
        if self.moves_remaining == 0:
            return self._reject(key, MOVE_LIMIT_REASON)

        result = preview_operation(self.current, op, allowed_axioms, allowed_operations)
        if not changes_forest(self.current, result):
            reason = explain_rejection(
                self.current, op, allowed_axioms, allowed_operations, self.sandbox_enabled,
            )
            logger.debug(f"{key} stalled: {reason}")
            self._trace.stall(key, self.current, reason)
            return OperationResult(False, reason)

        before = self.current
        self.past.append(clone_forest(before))
        self.future = []
        self.current = result
        self._clear_all_selection()
        self._trace.applied(key, before, self.current, self.move_count)
        self._refresh_status()
        return OperationResult(True)

    # ---------- history ----------

    def can_undo(self) -> bool:
        return bool(self.past)

    def can_redo(self) -> bool:
        return bool(self.future)

    def undo(self) -> bool:
        if not self.past:
            return False
        previous = self.past.pop()
        self.future.insert(0, clone_forest(self.current))
        self.current = clone_forest(previous)
        self._clear_all_selection()
        self._trace.undo(self.current)
        self._refresh_status()
        return True

    def redo(self) -> bool:
        if not self.future:
            return False
        following = self.future.pop(0)
        self.past.append(clone_forest(self.current))
        self.current = clone_forest(following)
        self._clear_all_selection()
        self._trace.redo(self.current)
        self._refresh_status()
        return True

    @property
    def move_count(self) -> int:
        return len(self.past)

    @property
    def moves_remaining(self) -> Optional[int]:
        """None when the level has no move limit."""
        if self.level is None or self.level.max_moves is None:
            return None
        return max(self.level.max_moves - self.move_count, 0)

    # ---------- selection ----------

    def toggle_selection(self, node_id: str) -> None:
        if node_id in self.selected_node_ids:
            self.selected_node_ids.remove(node_id)
        else:
            self.selected_node_ids.append(node_id)

    def clear_selection(self) -> None:
        self.selected_node_ids = []

    def select_parent(self, node_id: Optional[str]) -> None:
        """Select a parent for insertions; ROOT_NODE_ID or None means the root forest."""
        self.selected_parent_id = node_id

    def clear_parent_selection(self) -> None:
        self.selected_parent_id = None

    def set_sandbox_enabled(self, enabled: bool) -> None:
        self.sandbox_enabled = bool(enabled)

    # ---------- queries ----------

    def availability(self) -> Dict[str, Availability]:
        allowed_axioms, allowed_operations = self._allow_lists()
        return evaluate_operation_availability(
            self.current,
            self.selected_node_ids,
            self.selected_parent_id,
            self.status,
            allowed_axioms,
            allowed_operations,
            self.sandbox_enabled,
        )

    def is_won(self) -> bool:
        return self.status == WON

    def trace_events(self) -> List[dict]:
        return self._trace.get_events()

    # ---------- internals ----------

    def _clear_history(self) -> None:
        self.past = []
        self.future = []

    def _clear_all_selection(self) -> None:
        self.selected_node_ids = []
        self.selected_parent_id = None

    def _refresh_status(self) -> None:
        was_won = self.status == WON
        self.status = WON if check_win_condition(self.current, self.goal) else PLAYING
        if self.status == WON and not was_won and self.level is not None:
            logger.info(f"Level {self.level.id} solved in {self.move_count} move(s)")
            self._trace.won(self.level.id, self.move_count)


__all__ = ["GameSession", "OperationResult", "MOVE_LIMIT_REASON", "ROOT_NODE_ID"]
