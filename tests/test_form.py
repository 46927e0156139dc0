"""
Form model tests: constructors, identity dedup, cloning, canonical signature.
"""

from __future__ import annotations

import pytest

from bao.core.form import (
    ANGLE,
    ROUND,
    Form,
    angle,
    atom,
    canonical_signature,
    canonical_signature_forest,
    collect_form_forest_ids,
    collect_form_ids,
    create_form,
    deep_clone,
    noop,
    noop_forest,
    round_,
    square,
    traverse_form,
)


class TestConstructors:
    def test_fresh_ids(self):
        a, b = round_(), round_()
        assert a.id != b.id

    def test_children_deduped_by_identity(self):
        child = atom("x")
        parent = round_(child, child)
        assert len(parent.children) == 1

    def test_structurally_equal_siblings_coexist(self):
        parent = round_(atom("x"), atom("x"))
        assert len(parent.children) == 2

    def test_unknown_boundary_rejected(self):
        with pytest.raises(ValueError):
            Form("hexagon")

    def test_atom_requires_label(self):
        with pytest.raises(ValueError):
            atom("")
        with pytest.raises(ValueError):
            create_form("atom")

    def test_atom_rejects_children(self):
        with pytest.raises(ValueError):
            Form("atom", [round_()], label="x")

    def test_label_only_on_atoms(self):
        with pytest.raises(ValueError):
            Form(ROUND, label="x")

    def test_children_must_be_forms(self):
        with pytest.raises(TypeError):
            Form(ROUND, ["not a form"])

    def test_equality_is_identity(self):
        a, b = round_(), round_()
        assert a != b
        assert a.structurally_equal(b)

    def test_with_children_keeps_id(self):
        a = round_(atom("x"))
        b = a.with_children([atom("y")])
        assert b.id == a.id
        assert b is not a
        assert canonical_signature(a) == "round:[atom:x[]]"


class TestSignature:
    def test_signature_shape(self):
        form = round_(atom("x"), square(atom("a")))
        assert canonical_signature(form) == "round:[atom:x[],square:[atom:a[]]]"

    def test_order_invariant(self):
        left = round_(atom("a"), square(), angle())
        right = round_(angle(), atom("a"), square())
        assert canonical_signature(left) == canonical_signature(right)

    def test_forest_sorted(self):
        sigs = canonical_signature_forest([square(), angle(), round_()])
        assert sigs == sorted(sigs)

    def test_deep_nesting_has_no_recursion_limit(self):
        form = round_()
        for _ in range(2000):
            form = square(form) if form.boundary == ROUND else round_(form)
        sig = canonical_signature(form)
        assert sig.count("[") == 2001
        clone = deep_clone(form)
        assert canonical_signature(clone) == sig


class TestCloning:
    def test_deep_clone_fresh_ids_same_structure(self):
        form = round_(atom("x"), square(angle(atom("y"))))
        clone = deep_clone(form)
        expected = canonical_signature(form)
        assert canonical_signature(clone) == expected
        assert not collect_form_ids(form, expected) & collect_form_ids(clone, expected)

    def test_noop_is_single_clone(self):
        form = round_(atom("x"))
        out = noop(form)
        assert len(out) == 1
        assert out[0].id != form.id
        assert out[0].structurally_equal(form)

    def test_noop_forest_clones_all(self):
        forest = [round_(), angle()]
        out = noop_forest(forest)
        assert [f.boundary for f in out] == [ROUND, ANGLE]
        assert {f.id for f in out}.isdisjoint({f.id for f in forest})


class TestTraversalAndIds:
    def test_traverse_visits_each_node_once(self):
        form = round_(atom("x"), square(atom("a"), atom("b")))
        nodes = list(traverse_form(form))
        assert len(nodes) == 5
        assert len({n.id for n in nodes}) == 5

    def test_collect_form_ids_validates_structure(self):
        form = round_()
        with pytest.raises(ValueError):
            collect_form_ids(form, "square:[]")

    def test_collect_form_forest_ids(self):
        forest = [round_(atom("x")), angle()]
        ids = collect_form_forest_ids(forest, ["angle:[]", "round:[atom:x[]]"])
        assert len(ids) == 3
        with pytest.raises(ValueError):
            collect_form_forest_ids(forest, ["angle:[]"])

