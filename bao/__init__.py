# bao/__init__.py
"""
House of Bao engine: public API surface.

    - Forms: Form, create_form, round_, square, angle, atom, deep_clone,
             canonical_signature, canonical_signature_forest
    - Axioms: clarify, enfold, disperse, collect, cancel, create, reflect
    - Operations: Clarify, Enfold, Disperse, Collect, Cancel, Create,
                  AddBoundary, AddVariable, operation_from_json
    - Engine: preview_operation, NOT_MODIFIED
    - Game: GameSession, check_win_condition,
            evaluate_operation_availability
    - Levels: LevelDefinition, get_level, hydrate_level, list_level_names
"""

from __future__ import annotations

from .core.form import (
    ANGLE,
    ATOM,
    ROUND,
    SQUARE,
    Form,
    angle,
    atom,
    canonical_signature,
    canonical_signature_forest,
    create_form,
    deep_clone,
    round_,
    square,
)
from .axioms.inversion import clarify, enfold, enfold_round_square, enfold_square_round
from .axioms.arrangement import collect, disperse
from .axioms.reflection import cancel, create, create_reflection_pair, reflect
from .operations import (
    AddBoundary,
    AddVariable,
    Cancel,
    Clarify,
    Collect,
    Create,
    Disperse,
    Enfold,
    operation_from_json,
    operation_to_json,
)
from .engine.rewrite import NOT_MODIFIED
from .engine.dispatcher import explain_rejection, preview_operation
from .win import check_win_condition
from .availability import evaluate_operation_availability
from .session import GameSession, OperationResult
from .levels import LevelDefinition, get_level, hydrate_level, list_level_names

__version__ = "0.1.0"

__all__ = [
    # forms
    "ROUND",
    "SQUARE",
    "ANGLE",
    "ATOM",
    "Form",
    "create_form",
    "round_",
    "square",
    "angle",
    "atom",
    "deep_clone",
    "canonical_signature",
    "canonical_signature_forest",

    # axioms
    "clarify",
    "enfold",
    "enfold_round_square",
    "enfold_square_round",
    "disperse",
    "collect",
    "cancel",
    "create",
    "reflect",
    "create_reflection_pair",

    # operations
    "Clarify",
    "Enfold",
    "Disperse",
    "Collect",
    "Cancel",
    "Create",
    "AddBoundary",
    "AddVariable",
    "operation_from_json",
    "operation_to_json",

    # engine
    "NOT_MODIFIED",
    "preview_operation",
    "explain_rejection",

    # game
    "GameSession",
    "OperationResult",
    "check_win_condition",
    "evaluate_operation_availability",

    # levels
    "LevelDefinition",
    "get_level",
    "hydrate_level",
    "list_level_names",
]
