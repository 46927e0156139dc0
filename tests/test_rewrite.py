"""
Rewrite engine tests: locate, path copying and sibling-group rewrites.
"""

from __future__ import annotations

from bao.core.form import atom, canonical_signature_forest, deep_clone, round_, square
from bao.engine.rewrite import (
    NOT_MODIFIED,
    add_children,
    index_forest,
    locate,
    rewrite_sibling_group,
    rewrite_single_target,
)


def _tree():
    a, b, c = atom("a"), atom("b"), atom("c")
    inner = square(a, b)
    root = round_(inner, c)
    other = round_(atom("d"))
    return [root, other], root, inner, a, b, c, other


class TestLocate:
    def test_finds_nodes_and_parents(self):
        forest, root, inner, a, _, c, _ = _tree()
        found = locate(forest, [a.id, c.id, root.id])
        assert found[a.id].node is a
        assert found[a.id].parent is inner
        assert found[c.id].parent_id == root.id
        assert found[root.id].parent is None
        assert found[root.id].parent_id is None

    def test_missing_ids_are_absent(self):
        forest, *_ = _tree()
        assert locate(forest, ["missing"]) == {}
        assert locate(forest, []) == {}

    def test_index_forest(self):
        forest, root, inner, a, *_ = _tree()
        index = index_forest(forest)
        assert len(index) == 7
        assert index[a.id] == (a, inner.id)
        assert index[root.id] == (root, None)


class TestRewriteSingleTarget:
    def test_missing_target(self):
        forest, *_ = _tree()
        assert rewrite_single_target(forest, "missing", lambda f: []) is NOT_MODIFIED

    def test_path_copy_keeps_ancestor_ids_and_shares_untouched_subtrees(self):
        forest, root, inner, a, b, c, other = _tree()
        out = rewrite_single_target(forest, a.id, lambda f: [atom("z"), atom("y")])

        new_root, new_other = out
        assert new_other is other
        assert new_root is not root
        assert new_root.id == root.id
        new_inner = new_root.children[0]
        assert new_inner.id == inner.id
        assert [ch.label for ch in new_inner.children] == ["z", "y", "b"]
        assert new_inner.children[2] is b
        assert new_root.children[1] is c

    def test_input_is_not_mutated(self):
        forest, root, inner, a, *_ = _tree()
        before = canonical_signature_forest(forest)
        rewrite_single_target(forest, a.id, lambda f: [])
        assert canonical_signature_forest(forest) == before
        assert inner.children[0] is a

    def test_root_rewrite(self):
        forest, root, *_ = _tree()
        out = rewrite_single_target(forest, root.id, lambda f: [])
        assert len(out) == 1

    def test_empty_result_is_not_not_modified(self):
        single = round_()
        out = rewrite_single_target([single], single.id, lambda f: [])
        assert out == []
        assert out is not NOT_MODIFIED


class TestRewriteSiblingGroup:
    def test_siblings_replaced_and_output_appended(self):
        forest, root, inner, a, b, *_ = _tree()
        extra = atom("e")
        forest = rewrite_single_target(forest, inner.id, lambda f: [f.with_children([a, extra, b])])

        seen = []

        def transform(nodes):
            seen.extend(nodes)
            return [deep_clone(n) for n in reversed(nodes)]

        out = rewrite_sibling_group(forest, [b.id, a.id], transform)
        assert seen == [b, a]
        new_inner = out[0].children[0]
        assert [ch.label for ch in new_inner.children] == ["e", "a", "b"]

    def test_roots_form_a_group(self):
        forest, root, _, _, _, _, other = _tree()
        out = rewrite_sibling_group(forest, [root.id, other.id], lambda nodes: [atom("m")])
        assert canonical_signature_forest(out) == ["atom:m[]"]

    def test_two_parents_not_modified(self):
        forest, _, _, a, _, c, _ = _tree()
        assert rewrite_sibling_group(forest, [a.id, c.id], lambda nodes: []) is NOT_MODIFIED

    def test_unresolved_id_not_modified(self):
        forest, _, _, a, *_ = _tree()
        assert rewrite_sibling_group(forest, [a.id, "missing"], lambda nodes: []) is NOT_MODIFIED
        assert rewrite_sibling_group(forest, [], lambda nodes: []) is NOT_MODIFIED

    def test_duplicate_ids_count_once(self):
        forest, _, _, a, *_ = _tree()
        seen = []
        rewrite_sibling_group(forest, [a.id, a.id], lambda nodes: seen.extend(nodes) or [])
        assert seen == [a]


class TestAddChildren:
    def test_append_at_root(self):
        forest, *_ = _tree()
        out = add_children(forest, None, [atom("n")])
        assert len(out) == 3
        assert out[-1].label == "n"

    def test_append_under_parent(self):
        forest, root, inner, *_ = _tree()
        out = add_children(forest, inner.id, [atom("n")])
        assert [ch.label for ch in out[0].children[0].children] == ["a", "b", "n"]

    def test_missing_parent(self):
        forest, *_ = _tree()
        assert add_children(forest, "missing", [atom("n")]) is NOT_MODIFIED
