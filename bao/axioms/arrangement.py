# bao/axioms/arrangement.py
"""
Arrangement axiom.

    Disperse:  (A [B C]) -> (A [B]) (A [C])
    Collect:   (A [B]) (A [C]) -> (A [B C])

A frame is a round form holding at least one square. The square's siblings
are the frame's context and travel with every produced frame.

Dominion: a frame whose target square is empty is void, so dispersing it (or
collecting only empty squares) yields nothing at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.form import (
    Form,
    ROUND,
    SQUARE,
    canonical_signature_forest,
    deep_clone,
    noop,
    noop_forest,
    round_,
    square,
)


def get_square_children(form: Form) -> List[Form]:
    return [c for c in form.children if c.boundary == SQUARE]


def is_frame(form: Form) -> bool:
    return form.boundary == ROUND and bool(get_square_children(form))


def partition_frame_contents(
    available: Sequence[Form],
    requested_ids: Optional[Iterable[str]] = None,
) -> Optional[Tuple[List[Form], List[Form]]]:
    """
    Split square contents into (picked, remaining).

    No ids means pick everything. Duplicate ids count once. Any id that is
    not among `available` makes the whole selection invalid (None).
    """
    requested = list(dict.fromkeys(requested_ids or ()))
    if not requested:
        return list(available), []

    by_id = {f.id: f for f in available}
    picked: List[Form] = []
    for fid in requested:
        match = by_id.get(fid)
        if match is None:
            return None
        picked.append(match)

    picked_ids = set(requested)
    remaining = [f for f in available if f.id not in picked_ids]
    return picked, remaining


def clone_frame(context: Iterable[Form], contents: Iterable[Form]) -> Form:
    """(context... [contents...]) built entirely from fresh clones."""
    return round_(
        *(deep_clone(c) for c in context),
        square(*(deep_clone(c) for c in contents)),
    )


def _context_of(frame: Form, target_square: Form) -> List[Form]:
    return [c for c in frame.children if c is not target_square]


def _context_signature(frame: Form, target_square: Form) -> List[str]:
    return canonical_signature_forest(_context_of(frame, target_square))


# ---------- disperse ----------


def disperse(
    form: Form,
    square_id: Optional[str] = None,
    content_ids: Optional[Iterable[str]] = None,
) -> List[Form]:
    """
    Distribute the contents of one square across copies of its frame.

    `square_id` picks the square (default: the first square child) and
    `content_ids` the contents to split off (default: all of them). Picked
    contents each get their own frame; unpicked contents stay together in a
    remainder frame placed first.
    """
    if not is_frame(form):
        return noop(form)

    squares = get_square_children(form)
    if square_id:
        target = next((s for s in squares if s.id == square_id), None)
    else:
        target = squares[0]
    if target is None:
        return noop(form)

    if not target.children:
        # dominion: (A [ ]) is void
        return []

    selection = partition_frame_contents(target.children, content_ids)
    if selection is None:
        return noop(form)
    picked, remaining = selection

    context = _context_of(form, target)
    distributed = [clone_frame(context, [content]) for content in picked]
    if not remaining:
        return distributed
    return [clone_frame(context, remaining)] + distributed


# ---------- collect ----------


@dataclass(frozen=True)
class CollectTarget:
    """The shared context plus one matched square per input frame."""
    context: Tuple[Form, ...]
    squares: Tuple[Form, ...]


def _gather_matching_squares(candidate: Form, frames: Sequence[Form]) -> Optional[List[Form]]:
    template_sig = _context_signature(frames[0], candidate)
    matches = [candidate]
    for frame in frames[1:]:
        if not is_frame(frame):
            return None
        match = next(
            (
                option
                for option in get_square_children(frame)
                if option.children and _context_signature(frame, option) == template_sig
            ),
            None,
        )
        if match is None:
            return None
        matches.append(match)
    return matches


def resolve_collect_target(forms: Sequence[Form]) -> Optional[CollectTarget]:
    """
    Find one square per frame such that every frame's remaining context is
    structurally the same. Candidate squares come from the first form only;
    the first fully matching candidate wins.
    """
    if not forms:
        return None
    template = forms[0]
    if not is_frame(template):
        return None

    for candidate in get_square_children(template):
        if not candidate.children:
            continue
        matches = _gather_matching_squares(candidate, forms)
        if matches is not None:
            return CollectTarget(
                context=tuple(_context_of(template, candidate)),
                squares=tuple(matches),
            )
    return None


def is_collect_applicable(forms: Sequence[Form]) -> bool:
    return resolve_collect_target(forms) is not None


def collect(forms: Sequence[Form]) -> List[Form]:
    """
    Merge frames that share a context into a single frame.

    Returns [(context [all contents])] on success, or clones of every input
    when no shared target exists.
    """
    target = resolve_collect_target(forms)
    if target is None:
        return noop_forest(forms)

    merged = [content for sq in target.squares for content in sq.children]
    if not merged:
        # dominion: empty squares aggregate to void
        return []
    return [clone_frame(target.context, merged)]
