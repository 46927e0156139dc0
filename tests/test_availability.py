from __future__ import annotations

from bao.availability import (
    IDLE,
    PLAYING,
    ROOT_NODE_ID,
    Availability,
    evaluate_operation_availability,
)
from bao.core.form import atom, round_, square
from bao.operations import ALL_OPERATION_KEYS


def evaluate(**overrides):
    context = dict(
        forest=[],
        selected_node_ids=(),
        selected_parent_id=None,
        status=PLAYING,
        allowed_axioms=None,
        allowed_operations=None,
        sandbox_enabled=False,
    )
    context.update(overrides)
    return evaluate_operation_availability(**context)


def test_every_key_is_reported():
    assert set(evaluate()) == set(ALL_OPERATION_KEYS)


def test_idle_disables_everything():
    availability = evaluate(status=IDLE)
    assert not availability["clarify"].available
    assert "Load a level" in availability["clarify"].reason
    assert not availability["disperse"].available
    assert not availability["create"].available


def test_clarify_available_for_selected_pair():
    clarifiable = round_(square(atom("x")))
    availability = evaluate(forest=[clarifiable], selected_node_ids=[clarifiable.id])
    assert availability["clarify"] == Availability(True)


def test_collect_needs_a_frame_selection():
    frame = round_(square(atom("left")))
    square_child = frame.children[0]
    availability = evaluate(forest=[frame], selected_node_ids=[square_child.id])
    assert not availability["collect"].available
    assert availability["collect"].reason == "Select round frames that share the same context to collect."


def test_arrangement_axiom_lock_for_disperse():
    frame = round_(square(atom("a"), atom("b")))
    availability = evaluate(forest=[frame], selected_node_ids=[frame.id], allowed_axioms=["inversion"])
    assert not availability["disperse"].available
    assert availability["disperse"].reason == "This level disables arrangement actions."


def test_per_operation_locks():
    frame = round_(square(atom("a")))
    availability = evaluate(forest=[frame], selected_node_ids=[frame.id], allowed_operations=["enfoldFrame"])
    assert not availability["clarify"].available
    assert availability["clarify"].reason == "This level locks Clarify to focus on other actions."
    assert "locks" not in (availability["enfoldFrame"].reason or "")
    assert availability["enfoldFrame"].available


def test_sandbox_disabled():
    availability = evaluate(sandbox_enabled=False)
    for key in ("addRound", "addSquare", "addAngle", "addVariable"):
        assert not availability[key].available
        assert "Enable sandbox mode" in availability[key].reason


def test_add_round_available_in_sandbox():
    availability = evaluate(sandbox_enabled=True)
    assert availability["addRound"].available
    assert availability["addVariable"].available


def test_sandbox_wrapping_needs_siblings():
    frame = round_(square(atom("inner")), atom("solo"))
    square_child = frame.children[0]
    inner_leaf = square_child.children[0]
    availability = evaluate(
        forest=[frame],
        selected_node_ids=[square_child.id, inner_leaf.id],
        sandbox_enabled=True,
    )
    assert not availability["addSquare"].available
    assert availability["addSquare"].reason == "Select sibling nodes that share the same parent."


def test_stale_selection_and_parent():
    availability = evaluate(forest=[round_()], selected_node_ids=["gone"], selected_parent_id="gone-too")
    assert availability["clarify"].reason == "Selected form is no longer available."
    assert availability["enfoldFrame"].reason == "Selected parent is no longer available."
    assert availability["create"].reason == "Selected parent is no longer available."


def test_root_node_id_means_root_forest():
    availability = evaluate(forest=[round_()], selected_parent_id=ROOT_NODE_ID)
    assert availability["create"].available
    assert availability["enfoldMark"].available


def test_disperse_with_selected_frame_as_parent():
    frame = round_(square(atom("a"), atom("b")))
    availability = evaluate(forest=[frame], selected_parent_id=frame.id)
    assert availability["disperse"].available
