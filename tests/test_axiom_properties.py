"""
Axiom Property Tests

Property-based tests over arbitrary Forms to ensure:
1. deep_clone preserves structure and never reuses an id
2. collect undoes disperse on frames with a non-empty square
3. clarify undoes both enfold variants
4. cancel undoes create
5. axiom functions never return a node of their input
6. sibling-group operations never partially apply across two parents
"""

import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis required for property tests")

from hypothesis import given  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

from conftest import forms, frames  # noqa: E402

from bao.axioms.arrangement import collect, disperse  # noqa: E402
from bao.axioms.inversion import clarify, enfold_round_square, enfold_square_round  # noqa: E402
from bao.axioms.reflection import cancel, create  # noqa: E402
from bao.core.form import (  # noqa: E402
    ATOM,
    canonical_signature,
    canonical_signature_forest,
    deep_clone,
    round_,
    square,
    traverse_form,
)
from bao.engine.dispatcher import preview_operation  # noqa: E402
from bao.engine.rewrite import NOT_MODIFIED  # noqa: E402
from bao.operations import AddBoundary, Cancel, Collect, Enfold  # noqa: E402


def _ids(forest):
    return {n.id for f in forest for n in traverse_form(f)}


# =============================================================================
# Cloning
# =============================================================================


@given(forms())
def test_deep_clone_preserves_signature_and_refreshes_ids(form):
    clone = deep_clone(form)
    again = deep_clone(form)
    assert canonical_signature(clone) == canonical_signature(form)
    assert _ids([form]).isdisjoint(_ids([clone]))
    assert _ids([clone]).isdisjoint(_ids([again]))


@given(forms())
def test_signature_ignores_child_order(form):
    if form.boundary == ATOM:
        return
    flipped = form.with_children(reversed(form.children))
    assert canonical_signature(flipped) == canonical_signature(form)


# =============================================================================
# Inverse pairs
# =============================================================================


@given(frames())
def test_collect_inverts_disperse(frame):
    out = collect(disperse(frame))
    assert canonical_signature_forest(out) == [canonical_signature(frame)]


@given(forms())
def test_clarify_inverts_enfold(form):
    expected = [canonical_signature(form)]
    assert canonical_signature_forest(clarify(enfold_round_square(form))) == expected
    assert canonical_signature_forest(clarify(enfold_square_round(form))) == expected


@given(forms())
def test_cancel_inverts_create(form):
    assert cancel(create(form)) == []


@given(st.lists(forms(max_depth=2), max_size=3))
def test_cancel_inverts_create_for_several_templates(templates):
    assert cancel(create(*templates)) == []


# =============================================================================
# Freshness
# =============================================================================


@given(forms())
def test_single_form_axioms_never_alias_input(form):
    before = _ids([form])
    for out in (clarify(form), disperse(form)):
        assert before.isdisjoint(_ids(out))


@given(st.lists(forms(max_depth=2), max_size=4))
def test_multi_form_axioms_never_alias_input(forest):
    before = _ids(forest)
    for out in (collect(forest), cancel(forest)):
        assert before.isdisjoint(_ids(out))


# =============================================================================
# Selections spanning two parents
# =============================================================================


@given(forms(max_depth=2), forms(max_depth=2))
def test_two_parent_selection_is_never_applied(left, right):
    # one frame sits inside a square, the other at the root
    nested, top = round_(left), round_(right)
    forest = [square(nested), top]
    ids = [nested.id, top.id]
    for op in (Enfold(ids), Cancel(ids), AddBoundary(ids), Collect(ids)):
        assert preview_operation(forest, op) is NOT_MODIFIED
