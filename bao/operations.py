# bao/operations.py
"""
BAO OPERATIONS
==============
The closed set of user-facing operations. Each variant carries only ids
(never Form values) so it stays valid as a description across previews.

Axiom operations:
    Clarify(target_id)
    Enfold(target_ids, variant, parent_id)
    Disperse(content_ids, square_id, frame_id)
    Collect(target_ids)
    Cancel(target_ids)
    Create(parent_id, template_ids)

Sandbox operations (only with sandbox mode on):
    AddBoundary(target_ids, boundary, parent_id)
    AddVariable(label, parent_id)

JSON form is tagged by "type" and uses camelCase field names, matching the
level file format:

    {"type": "enfold", "targetIds": ["..."], "variant": "mark"}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from .axioms.inversion import ENFOLD_VARIANTS, FRAME, MARK
from .core.form import ANGLE, ROUND, SQUARE

# ---------- axiom tags ----------

INVERSION = "inversion"
ARRANGEMENT = "arrangement"
REFLECTION = "reflection"

AXIOM_TYPES = (INVERSION, ARRANGEMENT, REFLECTION)

# ---------- operation keys ----------

OPERATION_KEYS = (
    "clarify",
    "enfoldFrame",
    "enfoldMark",
    "disperse",
    "collect",
    "cancel",
    "create",
)

SANDBOX_OPERATION_KEYS = (
    "addRound",
    "addSquare",
    "addAngle",
    "addVariable",
)

ALL_OPERATION_KEYS = OPERATION_KEYS + SANDBOX_OPERATION_KEYS

OPERATION_AXIOMS = {
    "clarify": INVERSION,
    "enfoldFrame": INVERSION,
    "enfoldMark": INVERSION,
    "disperse": ARRANGEMENT,
    "collect": ARRANGEMENT,
    "cancel": REFLECTION,
    "create": REFLECTION,
}

SANDBOX_BOUNDARIES = (ROUND, SQUARE, ANGLE)


# =============================================================================
# Variants
# =============================================================================


@dataclass(frozen=True)
class Clarify:
    target_id: str


@dataclass(frozen=True)
class Enfold:
    target_ids: Tuple[str, ...] = ()
    variant: str = FRAME
    parent_id: Optional[str] = None

    def __post_init__(self):
        if self.variant not in ENFOLD_VARIANTS:
            raise ValueError(f"Unknown enfold variant: {self.variant!r}")
        object.__setattr__(self, "target_ids", tuple(self.target_ids))


@dataclass(frozen=True)
class Disperse:
    content_ids: Tuple[str, ...] = ()
    square_id: Optional[str] = None
    frame_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "content_ids", tuple(self.content_ids))


@dataclass(frozen=True)
class Collect:
    target_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "target_ids", tuple(self.target_ids))


@dataclass(frozen=True)
class Cancel:
    target_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "target_ids", tuple(self.target_ids))


@dataclass(frozen=True)
class Create:
    parent_id: Optional[str] = None
    template_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "template_ids", tuple(self.template_ids))


@dataclass(frozen=True)
class AddBoundary:
    target_ids: Tuple[str, ...] = ()
    boundary: str = ROUND
    parent_id: Optional[str] = None

    def __post_init__(self):
        if self.boundary not in SANDBOX_BOUNDARIES:
            raise ValueError(f"Sandbox cannot add boundary {self.boundary!r}")
        object.__setattr__(self, "target_ids", tuple(self.target_ids))


@dataclass(frozen=True)
class AddVariable:
    label: str
    parent_id: Optional[str] = None


Operation = Union[Clarify, Enfold, Disperse, Collect, Cancel, Create, AddBoundary, AddVariable]

SANDBOX_OPERATIONS = (AddBoundary, AddVariable)


def is_sandbox_operation(op: Operation) -> bool:
    return isinstance(op, SANDBOX_OPERATIONS)


def operation_key(op: Operation) -> str:
    """The allow-list key for an operation."""
    if isinstance(op, Clarify):
        return "clarify"
    if isinstance(op, Enfold):
        return "enfoldMark" if op.variant == MARK else "enfoldFrame"
    if isinstance(op, Disperse):
        return "disperse"
    if isinstance(op, Collect):
        return "collect"
    if isinstance(op, Cancel):
        return "cancel"
    if isinstance(op, Create):
        return "create"
    if isinstance(op, AddBoundary):
        return {SQUARE: "addSquare", ANGLE: "addAngle"}.get(op.boundary, "addRound")
    if isinstance(op, AddVariable):
        return "addVariable"
    raise TypeError(f"Not an operation: {op!r}")


def axiom_for(op: Operation) -> Optional[str]:
    """The axiom an operation belongs to; None for sandbox operations."""
    return OPERATION_AXIOMS.get(operation_key(op))


# =============================================================================
# JSON
# =============================================================================


def _ids(data: Dict[str, Any], field: str, required: bool = True) -> Tuple[str, ...]:
    if field not in data:
        if required:
            raise ValueError(f"operation missing {field!r}")
        return ()
    value = data[field]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{field!r} must be a list of id strings")
    return tuple(value)


def _optional_id(data: Dict[str, Any], field: str) -> Optional[str]:
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{field!r} must be an id string or null")
    return value


def operation_from_json(data: Any) -> Operation:
    """
    Build an operation from its JSON object form.

    Raises ValueError for anything malformed: unknown type, missing fields,
    wrong field types.
    """
    if not isinstance(data, dict):
        raise ValueError("operation must be a JSON object")
    kind = data.get("type")

    if kind == "clarify":
        target = data.get("targetId")
        if not isinstance(target, str):
            raise ValueError("'targetId' must be an id string")
        return Clarify(target)
    if kind == "enfold":
        variant = data.get("variant") or FRAME
        if not isinstance(variant, str):
            raise ValueError(f"'variant' must be one of {list(ENFOLD_VARIANTS)}")
        return Enfold(
            target_ids=_ids(data, "targetIds", required=False),
            variant=variant,
            parent_id=_optional_id(data, "parentId"),
        )
    if kind == "disperse":
        return Disperse(
            content_ids=_ids(data, "contentIds"),
            square_id=_optional_id(data, "squareId"),
            frame_id=_optional_id(data, "frameId"),
        )
    if kind == "collect":
        return Collect(_ids(data, "targetIds"))
    if kind == "cancel":
        return Cancel(_ids(data, "targetIds"))
    if kind == "create":
        return Create(
            parent_id=_optional_id(data, "parentId"),
            template_ids=_ids(data, "templateIds", required=False),
        )
    if kind == "addBoundary":
        boundary = data.get("boundary")
        if boundary not in SANDBOX_BOUNDARIES:
            raise ValueError(f"'boundary' must be one of {list(SANDBOX_BOUNDARIES)}")
        return AddBoundary(
            target_ids=_ids(data, "targetIds", required=False),
            boundary=boundary,
            parent_id=_optional_id(data, "parentId"),
        )
    if kind == "addVariable":
        label = data.get("label")
        if not isinstance(label, str):
            raise ValueError("'label' must be a string")
        return AddVariable(label, parent_id=_optional_id(data, "parentId"))
    raise ValueError(f"Unknown operation type: {kind!r}")


def operation_to_json(op: Operation) -> Dict[str, Any]:
    """Inverse of operation_from_json; optional fields are omitted when unset."""
    if isinstance(op, Clarify):
        return {"type": "clarify", "targetId": op.target_id}
    if isinstance(op, Enfold):
        out: Dict[str, Any] = {"type": "enfold", "targetIds": list(op.target_ids), "variant": op.variant}
        if op.parent_id is not None:
            out["parentId"] = op.parent_id
        return out
    if isinstance(op, Disperse):
        out = {"type": "disperse", "contentIds": list(op.content_ids)}
        if op.square_id is not None:
            out["squareId"] = op.square_id
        if op.frame_id is not None:
            out["frameId"] = op.frame_id
        return out
    if isinstance(op, Collect):
        return {"type": "collect", "targetIds": list(op.target_ids)}
    if isinstance(op, Cancel):
        return {"type": "cancel", "targetIds": list(op.target_ids)}
    if isinstance(op, Create):
        out = {"type": "create", "parentId": op.parent_id}
        if op.template_ids:
            out["templateIds"] = list(op.template_ids)
        return out
    if isinstance(op, AddBoundary):
        out = {"type": "addBoundary", "targetIds": list(op.target_ids), "boundary": op.boundary}
        if op.parent_id is not None:
            out["parentId"] = op.parent_id
        return out
    if isinstance(op, AddVariable):
        out = {"type": "addVariable", "label": op.label}
        if op.parent_id is not None:
            out["parentId"] = op.parent_id
        return out
    raise TypeError(f"Not an operation: {op!r}")
