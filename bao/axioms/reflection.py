# bao/axioms/reflection.py
"""
Reflection axiom.

    Cancel:  A <A> ->          < > ->
    Create:        -> A <A>        -> < >

An angle is the reflection of whatever it holds. A form standing beside its
reflection annihilates with it; an empty angle is a void reflection and
annihilates on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..core.form import (
    ANGLE,
    Form,
    angle,
    canonical_signature,
    clone_forest,
    deep_clone,
    noop_forest,
)


def reflect(form: Form) -> Form:
    """<form>, holding a fresh clone."""
    return angle(deep_clone(form))


def create_reflection_pair(form: Form) -> List[Form]:
    return [deep_clone(form), reflect(form)]


@dataclass(frozen=True)
class Cancellation:
    """
    One cancellation found in a forest.

    `angle_index` is the reflecting angle, `partner_indices` the positions it
    annihilates with. When only part of a multi-child angle was matched,
    `leftover` holds the angle's unmatched children and the angle survives
    with exactly those.
    """
    angle_index: int
    partner_indices: Tuple[int, ...] = ()
    leftover: Optional[Tuple[Form, ...]] = None

    @property
    def removed(self) -> Tuple[int, ...]:
        if self.leftover is None:
            return (self.angle_index,) + self.partner_indices
        return self.partner_indices


def _match_children(
    inner: Sequence[Form],
    angle_index: int,
    signatures: Sequence[str],
) -> List[Tuple[int, Optional[int]]]:
    """Pair each inner child with a distinct unused position, when possible."""
    used = {angle_index}
    pairs: List[Tuple[int, Optional[int]]] = []
    for child_index, child in enumerate(inner):
        sig = canonical_signature(child)
        partner = next(
            (i for i, s in enumerate(signatures) if i not in used and s == sig),
            None,
        )
        if partner is not None:
            used.add(partner)
        pairs.append((child_index, partner))
    return pairs


def find_cancellation(forms: Sequence[Form]) -> Optional[Cancellation]:
    """
    Search every angle against every other position.

    Preference order:
    1. an angle whose children are all matched by distinct other positions,
       the one with the most children first (a single-child angle and its
       partner is the common case);
    2. a void angle, which cancels alone;
    3. a multi-child angle with only some children matched, which loses one
       matched partner and survives with the rest.
    """
    signatures = [canonical_signature(f) for f in forms]
    angles = [i for i, f in enumerate(forms) if f.boundary == ANGLE]

    full: Optional[Cancellation] = None
    void: Optional[Cancellation] = None
    partial: Optional[Cancellation] = None
    for index in angles:
        inner = forms[index].children
        if not inner:
            if void is None:
                void = Cancellation(angle_index=index)
            continue

        pairs = _match_children(inner, index, signatures)
        partners = tuple(p for _, p in pairs if p is not None)
        if len(partners) == len(inner):
            if full is None or len(partners) > len(full.partner_indices):
                full = Cancellation(angle_index=index, partner_indices=partners)
            continue

        if partners and partial is None:
            # keep the first matched child only; the rest stay reflected
            first_child, first_partner = next((c, p) for c, p in pairs if p is not None)
            leftover = tuple(c for i, c in enumerate(inner) if i != first_child)
            partial = Cancellation(
                angle_index=index,
                partner_indices=(first_partner,),
                leftover=leftover,
            )
    if full is not None:
        return full
    return void if void is not None else partial


def is_cancel_applicable(forms: Sequence[Form]) -> bool:
    return find_cancellation(forms) is not None


def cancel(forms: Sequence[Form]) -> List[Form]:
    """
    Remove one cancellation and return clones of everything else.

    Without a cancellation the result is clones of every input. A partially
    matched angle is rebuilt in place holding only its unmatched children.
    """
    found = find_cancellation(forms)
    if found is None:
        return noop_forest(forms)

    removed = set(found.removed)
    survivors: List[Form] = []
    for index, form in enumerate(forms):
        if index in removed:
            continue
        if index == found.angle_index and found.leftover is not None:
            survivors.append(angle(*clone_forest(found.leftover)))
            continue
        survivors.append(deep_clone(form))
    return survivors


def create(*templates: Form) -> List[Form]:
    """
    Bring a reflection pair into being.

    No templates gives a bare <> placeholder. Otherwise every template is
    cloned as a base, followed by one angle holding clones of all of them.
    """
    if not templates:
        return [angle()]
    bases = clone_forest(templates)
    return bases + [angle(*clone_forest(templates))]
