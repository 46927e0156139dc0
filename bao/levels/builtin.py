# bao/levels/builtin.py
"""
Built-in levels and a small in-memory registry of raw level data.

The registry stores raw JSON-shaped dicts, never live Forms, so that every
get_level() call hydrates a fresh copy with its own ids.

- register_level(raw)
- get_level(level_id)      -> LevelDefinition (KeyError if unknown)
- has_level(level_id)
- list_level_names()
- clear_registry()

The built-ins are seeded lazily, so clear_registry() followed by any lookup
brings them back.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping

from .loader import hydrate_level, validate_level_json
from .types import LevelDefinition

RawLevel = Dict[str, Any]


def _void(boundary: str) -> RawLevel:
    return {"boundary": boundary, "children": []}


def _node(boundary: str, *children: RawLevel) -> RawLevel:
    return {"boundary": boundary, "children": list(children)}


RAW_LEVELS: List[RawLevel] = [
    {
        "id": "level-01",
        "name": "First Unwrap",
        "description": "Remove the paired boundaries to reveal the unit.",
        "difficulty": 1,
        "allowedAxioms": ["inversion"],
        "start": [_node("round", _node("square", _void("round")))],
        "goal": [_void("round")],
    },
    {
        "id": "level-02",
        "name": "Split the Context",
        "description": "Disperse the shared square into separate frames.",
        "difficulty": 1,
        "allowedAxioms": ["arrangement"],
        "start": [_node("round", _node("square", _void("round"), _void("round")))],
        "goal": [
            _node("round", _node("square", _void("round"))),
            _node("round", _node("square", _void("round"))),
        ],
    },
    {
        "id": "level-03",
        "name": "Create and Cancel",
        "description": "Create a reflected pair from nothing.",
        "difficulty": 1,
        "allowedAxioms": ["reflection"],
        "start": [],
        "goal": [_void("angle")],
    },
]

_REGISTRY: Dict[str, RawLevel] = {}
_DEFAULTS_SEEDED = False


# ---------------------------------------------------------------------------
# Core registry operations
# ---------------------------------------------------------------------------

def register_level(raw: Mapping[str, Any]) -> None:
    """
    Register (or overwrite) a raw level under its id.

    Raises:
        LevelFormatError: if the raw data fails schema validation.
    """
    validate_level_json(raw)
    _REGISTRY[raw["id"]] = copy.deepcopy(dict(raw))


def get_level(level_id: str) -> LevelDefinition:
    """
    Hydrate a registered level with fresh Forms.

    Raises:
        KeyError: if no level with this id is registered.
    """
    _ensure_defaults()
    if level_id not in _REGISTRY:
        raise KeyError(f"Unknown level: {level_id!r}")
    return hydrate_level(_REGISTRY[level_id])


def get_raw_level(level_id: str) -> RawLevel:
    _ensure_defaults()
    if level_id not in _REGISTRY:
        raise KeyError(f"Unknown level: {level_id!r}")
    return copy.deepcopy(_REGISTRY[level_id])


def has_level(level_id: str) -> bool:
    _ensure_defaults()
    return level_id in _REGISTRY


def list_level_names() -> List[str]:
    """Registered level ids, sorted for stability."""
    _ensure_defaults()
    return sorted(_REGISTRY.keys())


def clear_registry() -> None:
    """Remove every registered level. Built-ins are re-seeded on next lookup."""
    global _DEFAULTS_SEEDED
    _REGISTRY.clear()
    _DEFAULTS_SEEDED = False


# ---------------------------------------------------------------------------
# Built-ins
# ---------------------------------------------------------------------------

def _ensure_defaults() -> None:
    global _DEFAULTS_SEEDED
    if _DEFAULTS_SEEDED:
        return
    _DEFAULTS_SEEDED = True
    for raw in RAW_LEVELS:
        _REGISTRY.setdefault(raw["id"], copy.deepcopy(raw))
