# bao/axioms/inversion.py
"""
Inversion axiom.

    Clarify:  ([A]) -> A      [(A)] -> A
    Enfold:   A -> ([A])      A -> [(A)]

A round/square pair with nothing else beside the inner boundary can be
removed; any forms can be wrapped in a new pair.
"""

from __future__ import annotations

from typing import List, Optional

from ..core.form import (
    Form,
    ROUND,
    SQUARE,
    create_form,
    deep_clone,
    noop,
)

FRAME = "frame"  # ( [ ... ] )
MARK = "mark"    # [ ( ... ) ]

ENFOLD_VARIANTS = {
    FRAME: (ROUND, SQUARE),
    MARK: (SQUARE, ROUND),
}


def _invertible_pair(outer: str, inner: str) -> bool:
    return (outer, inner) in ((ROUND, SQUARE), (SQUARE, ROUND))


def invertible_child(form: Form) -> Optional[Form]:
    """The inner boundary of a removable pair, or None."""
    child = form.only_child()
    if child is None:
        return None
    return child if _invertible_pair(form.boundary, child.boundary) else None


def is_clarify_applicable(form: Form) -> bool:
    return invertible_child(form) is not None


def clarify(form: Form) -> List[Form]:
    """
    Remove a paired boundary, exposing what sat two levels down.

    Returns clones of the inner children (empty list for void), or a single
    fresh clone of `form` when there is no pair to remove.
    """
    child = invertible_child(form)
    if child is None:
        return noop(form)
    return [deep_clone(c) for c in child.children]


def enfold(variant: str, *forms: Form) -> Form:
    """
    Wrap clones of `forms` in a new pair of boundaries.

    "frame" builds ([...]), "mark" builds [(...)]. With no forms the pair is
    empty, which is how a pair is created from nothing.
    """
    if variant not in ENFOLD_VARIANTS:
        raise ValueError(f"Unknown enfold variant: {variant!r}")
    outer, inner = ENFOLD_VARIANTS[variant]
    wrapped = create_form(inner, *(deep_clone(f) for f in forms))
    return create_form(outer, wrapped)


def enfold_round_square(form: Form) -> Form:
    return enfold(FRAME, form)


def enfold_square_round(form: Form) -> Form:
    return enfold(MARK, form)
