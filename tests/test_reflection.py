from __future__ import annotations

from bao.axioms.reflection import (
    Cancellation,
    cancel,
    create,
    create_reflection_pair,
    find_cancellation,
    is_cancel_applicable,
    reflect,
)
from bao.core.form import (
    angle,
    atom,
    canonical_signature,
    canonical_signature_forest,
    round_,
    square,
    traverse_form,
)


def _ids(forms):
    return {n.id for f in forms for n in traverse_form(f)}


class TestReflect:
    def test_reflect_wraps_clone(self):
        a = atom("a")
        out = reflect(a)
        assert canonical_signature(out) == "angle:[atom:a[]]"
        assert a.id not in _ids([out])

    def test_reflection_pair(self):
        pair = create_reflection_pair(round_())
        assert [canonical_signature(f) for f in pair] == ["round:[]", "angle:[round:[]]"]


class TestFindCancellation:
    def test_pair_anywhere_in_forest(self):
        forms = [angle(atom("a")), square(), atom("b"), atom("a")]
        assert find_cancellation(forms) == Cancellation(angle_index=0, partner_indices=(3,))

    def test_no_angle_no_cancellation(self):
        assert find_cancellation([atom("a"), atom("a")]) is None
        assert not is_cancel_applicable([])

    def test_angle_cannot_pair_with_itself(self):
        assert find_cancellation([angle(angle())]) is None

    def test_repeated_inner_signature_uses_distinct_partners(self):
        forms = [angle(atom("a")), angle(atom("a")), atom("a")]
        found = find_cancellation(forms)
        assert found.angle_index == 0
        assert found.partner_indices == (2,)

    def test_pairs_preferred_over_void_reflection(self):
        forms = [angle(), angle(round_()), round_()]
        assert find_cancellation(forms) == Cancellation(angle_index=1, partner_indices=(2,))

    def test_largest_full_match_wins(self):
        forms = [angle(atom("a")), atom("a"), angle(angle(atom("a")), atom("a"))]
        assert find_cancellation(forms) == Cancellation(angle_index=2, partner_indices=(0, 1))

    def test_void_reflection_cancels_alone(self):
        assert find_cancellation([atom("a"), angle()]) == Cancellation(angle_index=1)

    def test_partial_match_keeps_leftover(self):
        b = atom("b")
        forms = [angle(atom("a"), b), atom("a")]
        found = find_cancellation(forms)
        assert found.partner_indices == (1,)
        assert found.leftover == (b,)
        assert found.removed == (1,)


class TestCancel:
    def test_pair_cancels_to_void(self):
        assert cancel([round_(), angle(round_())]) == []

    def test_survivors_are_clones(self):
        survivor = square(atom("s"))
        forms = [atom("a"), survivor, angle(atom("a"))]
        out = cancel(forms)
        assert canonical_signature_forest(out) == ["square:[atom:s[]]"]
        assert out[0].id != survivor.id

    def test_no_cancellation_returns_clones(self):
        forms = [atom("a"), angle(atom("b"))]
        out = cancel(forms)
        assert canonical_signature_forest(out) == canonical_signature_forest(forms)
        assert _ids(out).isdisjoint(_ids(forms))

    def test_void_reflection(self):
        out = cancel([atom("x"), angle()])
        assert canonical_signature_forest(out) == ["atom:x[]"]

    def test_multi_child_angle_fully_matched(self):
        forms = [atom("a"), atom("b"), angle(atom("a"), atom("b"))]
        assert cancel(forms) == []

    def test_partial_match_preserves_angle_context(self):
        forms = [atom("x"), angle(atom("x"), atom("y")), atom("z")]
        out = cancel(forms)
        assert [canonical_signature(f) for f in out] == ["angle:[atom:y[]]", "atom:z[]"]

    def test_one_cancellation_per_call(self):
        forms = [atom("a"), angle(atom("a")), atom("b"), angle(atom("b"))]
        out = cancel(forms)
        assert canonical_signature_forest(out) == ["angle:[atom:b[]]", "atom:b[]"]


class TestCreate:
    def test_bare_placeholder(self):
        out = create()
        assert [canonical_signature(f) for f in out] == ["angle:[]"]

    def test_single_template(self):
        a = atom("a")
        out = create(a)
        assert [canonical_signature(f) for f in out] == ["atom:a[]", "angle:[atom:a[]]"]
        assert a.id not in _ids(out)
        assert out[0].id != out[1].children[0].id

    def test_several_templates_share_one_angle(self):
        out = create(atom("a"), round_())
        assert [canonical_signature(f) for f in out] == [
            "atom:a[]",
            "round:[]",
            "angle:[atom:a[],round:[]]",
        ]

    def test_create_then_cancel(self):
        assert cancel(create()) == []
        assert cancel(create(atom("a"))) == []
        assert cancel(create(atom("a"), square(atom("b")))) == []
        assert cancel(create(angle())) == []
