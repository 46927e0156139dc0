# bao/levels/types.py
"""
Level model.

A raw level is plain JSON data (see loader.LEVEL_SCHEMA). A LevelDefinition
is the hydrated form: start and goal hold live Forms with fresh ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.form import ANGLE, ATOM, BOUNDARIES, ROUND, SQUARE, Form
from ..operations import (
    ALL_OPERATION_KEYS,
    ARRANGEMENT,
    AXIOM_TYPES,
    INVERSION,
    OPERATION_KEYS,
    REFLECTION,
)

DIFFICULTIES = (1, 2, 3, 4, 5)


class LevelFormatError(ValueError):
    """Raw level data that cannot be turned into a LevelDefinition."""


@dataclass(frozen=True)
class LevelDefinition:
    id: str
    name: str
    start: Tuple[Form, ...]
    goal: Tuple[Form, ...]
    difficulty: int = 1
    description: Optional[str] = None
    max_moves: Optional[int] = None
    allowed_axioms: Optional[Tuple[str, ...]] = None
    allowed_operations: Optional[Tuple[str, ...]] = None
    hints: Tuple[str, ...] = field(default_factory=tuple)


__all__ = [
    "ANGLE",
    "ATOM",
    "BOUNDARIES",
    "ROUND",
    "SQUARE",
    "INVERSION",
    "ARRANGEMENT",
    "REFLECTION",
    "AXIOM_TYPES",
    "OPERATION_KEYS",
    "ALL_OPERATION_KEYS",
    "DIFFICULTIES",
    "LevelFormatError",
    "LevelDefinition",
]
