"""
Bao Operation Dispatcher

Maps each operation variant onto the rewrite engine and an axiom function:

    Clarify     -> rewrite_single_target + clarify     (falls back to parent)
    Enfold      -> rewrite_sibling_group + enfold       (or add_children)
    Disperse    -> rewrite_single_target + disperse     (frame inferred)
    Collect     -> rewrite_sibling_group + collect      (square hint)
    Cancel      -> rewrite_sibling_group + cancel       (partners added)
    Create      -> add_children + create
    AddBoundary -> rewrite_sibling_group / add_children  (sandbox)
    AddVariable -> add_children                          (sandbox)

preview_operation never raises for a well-typed operation. It returns the
new forest, or NOT_MODIFIED when the operation is locked, the selection does
not resolve, or nothing would change.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..axioms.arrangement import collect, disperse, get_square_children
from ..axioms.inversion import clarify, enfold, is_clarify_applicable
from ..axioms.reflection import cancel, create, is_cancel_applicable
from ..core.form import (
    ANGLE,
    ROUND,
    SQUARE,
    Form,
    atom,
    canonical_signature,
    clone_forest,
    create_form,
    deep_clone,
)
from ..operations import (
    AXIOM_TYPES,
    AddBoundary,
    AddVariable,
    Cancel,
    Clarify,
    Collect,
    Create,
    Disperse,
    Enfold,
    Operation,
    axiom_for,
    is_sandbox_operation,
    operation_key,
)
from ..win import forests_equivalent
from .rewrite import (
    NOT_MODIFIED,
    add_children,
    locate,
    rewrite_single_target,
    rewrite_sibling_group,
)

logger = logging.getLogger(__name__)

AllowList = Optional[Sequence[str]]


# =============================================================================
# Allow-lists
# =============================================================================


def is_axiom_allowed(allowed_axioms: AllowList, axiom: str) -> bool:
    """Empty or missing lists allow everything."""
    if not allowed_axioms:
        return True
    return axiom in allowed_axioms


def is_operation_allowed(allowed_operations: AllowList, op: Operation) -> bool:
    if is_sandbox_operation(op):
        return True
    if not allowed_operations:
        return True
    return operation_key(op) in allowed_operations


# =============================================================================
# Selection helpers
# =============================================================================


def ensure_cancel_pairs(forest: Sequence[Form], target_ids: Sequence[str]) -> List[str]:
    """
    Extend a cancel selection with reflection partners among its siblings.

    A selected angle pulls in a sibling matching one of its children; a
    selected plain form pulls in a sibling angle that reflects it. Selections
    that do not resolve to one parent are returned deduplicated but as-is.
    """
    unique_ids = list(dict.fromkeys(target_ids))
    if not unique_ids:
        return unique_ids

    located = locate(forest, unique_ids)
    if len(located) != len(unique_ids):
        return unique_ids
    if len({entry.parent_id for entry in located.values()}) != 1:
        return unique_ids

    parent = located[unique_ids[0]].parent
    siblings = list(parent.children) if parent is not None else list(forest)

    by_signature: Dict[str, List[Form]] = {}
    angles_by_inner: Dict[str, List[Form]] = {}
    for sibling in siblings:
        by_signature.setdefault(canonical_signature(sibling), []).append(sibling)
        if sibling.boundary == ANGLE:
            for child in sibling.children:
                bucket = angles_by_inner.setdefault(canonical_signature(child), [])
                if sibling not in bucket:
                    bucket.append(sibling)

    augmented = dict.fromkeys(unique_ids)
    for fid in unique_ids:
        form = located[fid].node
        if form.boundary == ANGLE:
            for child in form.children:
                partner = next(
                    (c for c in by_signature.get(canonical_signature(child), ()) if c.id != form.id),
                    None,
                )
                if partner is not None:
                    augmented[partner.id] = None
                    break
        else:
            partner = next(
                (c for c in angles_by_inner.get(canonical_signature(form), ()) if c.id != form.id),
                None,
            )
            if partner is not None:
                augmented[partner.id] = None
    return list(augmented)


def disperse_content(forest: Sequence[Form], content_ids: Sequence[str]):
    """Disperse with the square and frame inferred from the selected contents."""
    unique_ids = list(dict.fromkeys(content_ids))
    if not unique_ids:
        return NOT_MODIFIED

    located = locate(forest, unique_ids)
    if len(located) != len(unique_ids):
        return NOT_MODIFIED

    parents = {entry.parent_id for entry in located.values()}
    if len(parents) != 1:
        return NOT_MODIFIED
    (square_id,) = parents
    if square_id is None:
        return NOT_MODIFIED

    square_entry = locate(forest, [square_id]).get(square_id)
    if square_entry is None or square_entry.parent is None:
        return NOT_MODIFIED
    if square_entry.node.boundary != SQUARE:
        return NOT_MODIFIED

    return rewrite_single_target(
        forest,
        square_entry.parent.id,
        lambda frame: disperse(frame, square_id=square_id, content_ids=unique_ids),
    )


def _promote_square(frame: Form, signature: str) -> Form:
    """The frame with the first square matching `signature` moved to the first square slot."""
    squares = get_square_children(frame)
    target = next((s for s in squares if canonical_signature(s) == signature), None)
    if target is None:
        return frame
    ordered = iter([target] + [s for s in squares if s is not target])
    return frame.with_children(
        next(ordered) if child.boundary == SQUARE else child for child in frame.children
    )


# =============================================================================
# Per-operation previews
# =============================================================================


def _preview_clarify(forest, op: Clarify):
    attempt = rewrite_single_target(forest, op.target_id, clarify)
    if attempt is not NOT_MODIFIED and not forests_equivalent(attempt, forest):
        return attempt

    entry = locate(forest, [op.target_id]).get(op.target_id)
    if entry is None or entry.parent is None:
        return NOT_MODIFIED
    if not is_clarify_applicable(entry.parent):
        return NOT_MODIFIED
    logger.debug(f"clarify: falling back from {op.target_id} to parent {entry.parent.id}")
    return rewrite_single_target(forest, entry.parent.id, clarify)


def _preview_enfold(forest, op: Enfold):
    target_ids = list(dict.fromkeys(op.target_ids))
    if not target_ids:
        return add_children(forest, op.parent_id, [enfold(op.variant)])
    return rewrite_sibling_group(forest, target_ids, lambda nodes: [enfold(op.variant, *nodes)])


def _preview_disperse(forest, op: Disperse):
    if op.frame_id:
        return rewrite_single_target(
            forest,
            op.frame_id,
            lambda frame: disperse(frame, square_id=op.square_id, content_ids=op.content_ids),
        )
    return disperse_content(forest, op.content_ids)


def _preview_collect(forest, op: Collect):
    unique_ids = list(dict.fromkeys(op.target_ids))
    if not unique_ids:
        return NOT_MODIFIED

    located = locate(forest, unique_ids)
    frame_ids = [fid for fid in unique_ids if fid in located and located[fid].node.boundary == ROUND]
    if not frame_ids:
        return NOT_MODIFIED

    hint = next(
        (located[fid] for fid in unique_ids if fid in located and located[fid].node.boundary == SQUARE),
        None,
    )
    hint_parent_id = hint.parent_id if hint is not None else None
    if hint_parent_id in frame_ids:
        logger.debug(f"collect: square hint puts frame {hint_parent_id} first")
        frame_ids = [hint_parent_id] + [fid for fid in frame_ids if fid != hint_parent_id]
    else:
        hint_parent_id = None
    hint_signature = canonical_signature(hint.node) if hint_parent_id else None

    def _collect(frames: List[Form]) -> List[Form]:
        clones = clone_forest(frames)
        if hint_signature is not None:
            clones[0] = _promote_square(clones[0], hint_signature)
        return collect(clones)

    return rewrite_sibling_group(forest, frame_ids, _collect)


def _preview_cancel(forest, op: Cancel):
    augmented = ensure_cancel_pairs(forest, op.target_ids)

    def _cancel(forms: List[Form]) -> List[Form]:
        if not is_cancel_applicable(forms):
            return forms
        return cancel(clone_forest(forms))

    return rewrite_sibling_group(forest, augmented, _cancel)


def _preview_create(forest, op: Create):
    templates: List[Form] = []
    inferred_parent: Optional[str] = None
    if op.template_ids:
        located = locate(forest, op.template_ids)
        first = True
        for fid in op.template_ids:
            entry = located.get(fid)
            if entry is None:
                continue
            templates.append(deep_clone(entry.node))
            if first:
                inferred_parent = entry.parent_id
                first = False

    parent_id = op.parent_id if op.parent_id is not None else inferred_parent
    return add_children(forest, parent_id, create(*templates))


def _preview_add_boundary(forest, op: AddBoundary):
    target_ids = list(dict.fromkeys(op.target_ids))
    if not target_ids:
        return add_children(forest, op.parent_id, [create_form(op.boundary)])
    return rewrite_sibling_group(
        forest,
        target_ids,
        lambda nodes: [create_form(op.boundary, *nodes)],
    )


def _preview_add_variable(forest, op: AddVariable):
    label = op.label.strip()
    if not label:
        return NOT_MODIFIED
    return add_children(forest, op.parent_id, [atom(label)])


_PREVIEWS: Dict[type, Callable] = {
    Clarify: _preview_clarify,
    Enfold: _preview_enfold,
    Disperse: _preview_disperse,
    Collect: _preview_collect,
    Cancel: _preview_cancel,
    Create: _preview_create,
    AddBoundary: _preview_add_boundary,
    AddVariable: _preview_add_variable,
}


def preview_operation(
    forest: Sequence[Form],
    op: Operation,
    allowed_axioms: AllowList = None,
    allowed_operations: AllowList = None,
):
    """
    Compute the forest an operation would produce, without committing it.

    Returns the new forest (possibly structurally equal to the input; callers
    decide what counts as a change) or NOT_MODIFIED.
    """
    if not is_operation_allowed(allowed_operations, op):
        logger.debug(f"{operation_key(op)}: locked by allowed operations")
        return NOT_MODIFIED
    axiom = axiom_for(op)
    if axiom is not None and not is_axiom_allowed(allowed_axioms, axiom):
        logger.debug(f"{operation_key(op)}: {axiom} disabled by allowed axioms")
        return NOT_MODIFIED

    handler = _PREVIEWS.get(type(op))
    if handler is None:
        raise TypeError(f"Not an operation: {op!r}")
    return handler(list(forest), op)


def changes_forest(forest: Sequence[Form], result) -> bool:
    """A preview counts as a change only when it is structurally different."""
    return result is not NOT_MODIFIED and not forests_equivalent(result, forest)


# =============================================================================
# Reasons
# =============================================================================

LOAD_LEVEL_REASON = "Load a level to use axiom actions."
SELECTION_STALE_REASON = "Selected form is no longer available."
PARENT_STALE_REASON = "Selected parent is no longer available."
PARENT_MISMATCH_REASON = "Select sibling nodes that share the same parent."
EMPTY_LABEL_REASON = "Enter a label to add a variable."

AXIOM_REASONS = {axiom: f"This level disables {axiom} actions." for axiom in AXIOM_TYPES}

FALLBACK_REASONS = {
    "clarify": "Select a round-square pair to clarify.",
    "enfoldFrame": "Select sibling forms or choose a parent to add a frame.",
    "enfoldMark": "Select sibling forms or choose a parent to add a mark.",
    "disperse": "Select contents inside a single square to disperse.",
    "collect": "Select round frames that share the same context to collect.",
    "cancel": "Select a form and its reflection (or an empty angle) to cancel.",
    "create": "Choose a parent or template to create a reflection pair.",
    "addRound": "Select sibling forms or choose a parent to add a round.",
    "addSquare": "Select sibling forms or choose a parent to add a square.",
    "addAngle": "Select sibling forms or choose a parent to add an angle.",
    "addVariable": "Choose a parent to add a variable.",
}

OPERATION_LABELS = {
    "clarify": "Clarify",
    "enfoldFrame": "Enfold Frame",
    "enfoldMark": "Enfold Mark",
    "disperse": "Disperse",
    "collect": "Collect",
    "cancel": "Cancel",
    "create": "Create",
}

SANDBOX_REASONS = {
    "addRound": "Enable sandbox mode to add rounds.",
    "addSquare": "Enable sandbox mode to add squares.",
    "addAngle": "Enable sandbox mode to add angles.",
    "addVariable": "Enable sandbox mode to add variables.",
}


def operation_locked_reason(key: str) -> str:
    return f"This level locks {OPERATION_LABELS.get(key, key)} to focus on other actions."


def _referenced_ids(op: Operation) -> List[str]:
    if isinstance(op, Clarify):
        return [op.target_id]
    if isinstance(op, (Enfold, Collect, Cancel, AddBoundary)):
        return list(op.target_ids)
    if isinstance(op, Disperse):
        return list(op.content_ids)
    if isinstance(op, Create):
        return list(op.template_ids)
    return []


def _sibling_ids(op: Operation) -> List[str]:
    if isinstance(op, (Enfold, Cancel, AddBoundary)):
        return list(op.target_ids)
    if isinstance(op, Disperse) and not op.frame_id:
        return list(op.content_ids)
    return []


def explain_rejection(
    forest: Sequence[Form],
    op: Operation,
    allowed_axioms: AllowList = None,
    allowed_operations: AllowList = None,
    sandbox_enabled: bool = True,
) -> Optional[str]:
    """
    Human-readable reason an operation would not change the forest.

    Returns None when the operation would apply. Advisory only: the reason
    names the first guard that fails, in the order the dispatcher checks them.
    """
    key = operation_key(op)
    if is_sandbox_operation(op) and not sandbox_enabled:
        return SANDBOX_REASONS[key]
    if not is_operation_allowed(allowed_operations, op):
        return operation_locked_reason(key)
    axiom = axiom_for(op)
    if axiom is not None and not is_axiom_allowed(allowed_axioms, axiom):
        return AXIOM_REASONS[axiom]

    if changes_forest(forest, preview_operation(forest, op, allowed_axioms, allowed_operations)):
        return None

    referenced = _referenced_ids(op)
    located = locate(forest, referenced)
    if any(fid not in located for fid in referenced):
        return SELECTION_STALE_REASON
    parent_id = getattr(op, "parent_id", None)
    if parent_id is not None and parent_id not in locate(forest, [parent_id]):
        return PARENT_STALE_REASON
    siblings = _sibling_ids(op)
    if len({located[fid].parent_id for fid in siblings}) > 1:
        return PARENT_MISMATCH_REASON
    if isinstance(op, AddVariable) and not op.label.strip():
        return EMPTY_LABEL_REASON
    return FALLBACK_REASONS[key]
