"""
BAO FORM CORE
=============
A Form is a boundary around other Forms.

    round   ( ... )
    square  [ ... ]
    angle   < ... >
    atom    a named variable, never has children

Identity is an opaque id; structure is the canonical signature.
Nothing here mutates a Form after construction: every transformation
builds new nodes with fresh ids and leaves the old ones untouched.
"""

from __future__ import annotations

import uuid
from typing import Dict, Iterable, Iterator, List, Optional, Set

ROUND = "round"
SQUARE = "square"
ANGLE = "angle"
ATOM = "atom"

BOUNDARIES = (ROUND, SQUARE, ANGLE, ATOM)


def new_form_id() -> str:
    return str(uuid.uuid4())


def _dedupe_by_identity(children: Iterable["Form"]) -> tuple:
    seen: Set[int] = set()
    out = []
    for child in children:
        if not isinstance(child, Form):
            raise TypeError(f"Form children must be Form, got {type(child).__name__}")
        if id(child) in seen:
            continue
        seen.add(id(child))
        out.append(child)
    return tuple(out)


class Form:
    """A boundary node. Equality and hashing are by identity."""

    __slots__ = ("id", "boundary", "children", "label")

    def __init__(self, boundary: str, children: Iterable["Form"] = (),
                 label: Optional[str] = None, form_id: Optional[str] = None):
        if boundary not in BOUNDARIES:
            raise ValueError(f"Unknown boundary: {boundary!r}")
        kids = _dedupe_by_identity(children)
        if boundary == ATOM:
            if kids:
                raise ValueError("atom forms cannot have children")
            if not isinstance(label, str) or not label:
                raise ValueError("atom forms require a non-empty label")
        elif label is not None:
            raise ValueError(f"{boundary} forms cannot carry a label")

        self.id = form_id if form_id is not None else new_form_id()
        self.boundary = boundary
        self.children = kids
        self.label = label

    # ---------- structural identity ----------

    def structurally_equal(self, other) -> bool:
        if not isinstance(other, Form):
            return False
        return canonical_signature(self) == canonical_signature(other)

    def with_children(self, children: Iterable["Form"]) -> "Form":
        """Same id, boundary and label over a freshly assembled children tuple."""
        return Form(self.boundary, children, label=self.label, form_id=self.id)

    def __repr__(self):
        if self.boundary == ATOM:
            return f"atom({self.label!r})"
        inner = ", ".join(repr(c) for c in self.children)
        name = "round_" if self.boundary == ROUND else self.boundary
        return f"{name}({inner})"

    # ---------- primitive queries ----------

    def is_void(self) -> bool:
        return self.boundary != ATOM and not self.children

    def only_child(self) -> Optional["Form"]:
        if len(self.children) != 1:
            return None
        return self.children[0]


# ---------- constructors ----------


def create_form(boundary: str, *children: Form, label: Optional[str] = None) -> Form:
    """Build a node with a fresh id and its own copy of the children."""
    return Form(boundary, children, label=label)


def round_(*children: Form) -> Form:
    return create_form(ROUND, *children)


def square(*children: Form) -> Form:
    return create_form(SQUARE, *children)


def angle(*children: Form) -> Form:
    return create_form(ANGLE, *children)


def atom(label: str) -> Form:
    return create_form(ATOM, label=label)


# ---------- traversal ----------


def traverse_form(form: Form) -> Iterator[Form]:
    """Yield every node of the tree exactly once, depth-first."""
    stack: List[Form] = [form]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _postorder(form: Form) -> List[Form]:
    """Nodes ordered so that every child precedes its parent."""
    order: List[Form] = []
    stack = [(form, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        stack.append((node, True))
        for child in node.children:
            stack.append((child, False))
    return order


# ---------- cloning ----------


def deep_clone(form: Form) -> Form:
    """Rebuild the whole subtree with fresh ids; boundary and label are kept."""
    built: Dict[int, Form] = {}
    for node in _postorder(form):
        built[id(node)] = Form(
            node.boundary,
            [built[id(c)] for c in node.children],
            label=node.label,
        )
    return built[id(form)]


def clone_forest(forms: Iterable[Form]) -> List[Form]:
    return [deep_clone(f) for f in forms]


def noop(form: Form) -> List[Form]:
    """The "not applicable" answer of single-form axioms: one fresh clone."""
    return [deep_clone(form)]


def noop_forest(forms: Iterable[Form]) -> List[Form]:
    """The "not applicable" answer of multi-form axioms: fresh clones of all."""
    return clone_forest(forms)


# ---------- canonical signature ----------


def canonical_signature(form: Form) -> str:
    """
    Order-invariant structural fingerprint: boundary:label[sorted child sigs].

    Ids are ignored and sibling order does not matter.
    """
    sigs: Dict[int, str] = {}
    for node in _postorder(form):
        child_sigs = sorted(sigs[id(c)] for c in node.children)
        sigs[id(node)] = f"{node.boundary}:{node.label or ''}[{','.join(child_sigs)}]"
    return sigs[id(form)]


def canonical_signature_forest(forms: Iterable[Form]) -> List[str]:
    """Sorted signatures of every form in a forest."""
    return sorted(canonical_signature(f) for f in forms)


# ---------- id collection (test aids) ----------


def collect_form_ids(form: Form, expected_signature: Optional[str] = None) -> Set[str]:
    """
    Every id in the tree. When an expected signature is given the structure
    is checked first and a mismatch raises ValueError.
    """
    actual = canonical_signature(form)
    if expected_signature is not None and actual != expected_signature:
        raise ValueError(
            f'Expected canonical signature "{expected_signature}" but received "{actual}"'
        )
    return {node.id for node in traverse_form(form)}


def collect_form_forest_ids(forms: Iterable[Form],
                            expected_signatures: Optional[List[str]] = None) -> Set[str]:
    materialized = list(forms)
    actual = canonical_signature_forest(materialized)
    if expected_signatures is not None and actual != sorted(expected_signatures):
        raise ValueError(
            f"Expected canonical signatures {sorted(expected_signatures)} but received {actual}"
        )
    ids: Set[str] = set()
    for form in materialized:
        ids.update(node.id for node in traverse_form(form))
    return ids
