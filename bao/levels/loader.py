# bao/levels/loader.py
"""
Level loading.

Raw level data is validated against LEVEL_SCHEMA (JSON Schema draft 2020-12)
and then hydrated: every raw node becomes a live Form with a fresh id, so two
hydrations of the same raw level never share an id.

Validation happens here, at the load boundary. Anything the engine would
treat as a contract violation (an atom with children or without a label, an
unknown boundary, an unknown axiom) raises LevelFormatError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

import jsonschema

from ..core.form import ATOM, BOUNDARIES, Form
from .types import (
    ALL_OPERATION_KEYS,
    AXIOM_TYPES,
    DIFFICULTIES,
    LevelDefinition,
    LevelFormatError,
)

logger = logging.getLogger(__name__)

RAW_FORM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["boundary"],
    "properties": {
        "boundary": {"enum": list(BOUNDARIES)},
        "label": {"type": "string", "minLength": 1},
        "children": {"type": "array", "items": {"$ref": "#/$defs/rawForm"}},
    },
    "allOf": [
        {
            "if": {"properties": {"boundary": {"const": ATOM}}},
            "then": {
                "required": ["label"],
                "properties": {"children": {"maxItems": 0}},
            },
            "else": {"not": {"required": ["label"]}},
        }
    ],
}

LEVEL_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "bao level definition",
    "type": "object",
    "required": ["id", "name", "difficulty", "start", "goal"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "difficulty": {"enum": list(DIFFICULTIES)},
        "start": {"type": "array", "items": {"$ref": "#/$defs/rawForm"}},
        "goal": {"type": "array", "items": {"$ref": "#/$defs/rawForm"}},
        "maxMoves": {"type": "integer", "minimum": 1},
        "allowedAxioms": {
            "type": "array",
            "items": {"enum": list(AXIOM_TYPES)},
            "uniqueItems": True,
        },
        "allowedOperations": {
            "type": "array",
            "items": {"enum": list(ALL_OPERATION_KEYS)},
            "uniqueItems": True,
        },
        "hints": {"type": "array", "items": {"type": "string"}},
    },
    "$defs": {"rawForm": RAW_FORM_SCHEMA},
}

_VALIDATOR = jsonschema.Draft202012Validator(LEVEL_SCHEMA)

PathLike = Union[str, Path]


def validate_level_json(raw: Any) -> None:
    """Raise LevelFormatError describing the first schema violation, if any."""
    errors = sorted(_VALIDATOR.iter_errors(raw), key=lambda e: list(e.absolute_path))
    if not errors:
        return
    first = errors[0]
    where = "/".join(str(p) for p in first.absolute_path) or "<root>"
    level_id = raw.get("id") if isinstance(raw, Mapping) else None
    raise LevelFormatError(f"level {level_id!r}: {where}: {first.message}")


def instantiate_form(node: Mapping[str, Any]) -> Form:
    """Build a live Form tree from a raw node, iteratively, with fresh ids."""
    done: List[Form] = []
    stack = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        raw_children = current.get("children") or ()
        if not expanded:
            stack.append((current, True))
            stack.extend((c, False) for c in reversed(raw_children))
            continue
        split = len(done) - len(raw_children)
        children, done[split:] = done[split:], []
        try:
            done.append(Form(current.get("boundary"), children, label=current.get("label")))
        except ValueError as exc:
            raise LevelFormatError(str(exc)) from exc
    return done[0]


def _optional_tuple(raw: Mapping[str, Any], key: str):
    value = raw.get(key)
    return tuple(value) if value is not None else None


def hydrate_level(raw: Mapping[str, Any]) -> LevelDefinition:
    """Validate one raw level and materialize it with fresh Forms."""
    validate_level_json(raw)
    return LevelDefinition(
        id=raw["id"],
        name=raw["name"],
        start=tuple(instantiate_form(n) for n in raw["start"]),
        goal=tuple(instantiate_form(n) for n in raw["goal"]),
        difficulty=raw["difficulty"],
        description=raw.get("description"),
        max_moves=raw.get("maxMoves"),
        allowed_axioms=_optional_tuple(raw, "allowedAxioms"),
        allowed_operations=_optional_tuple(raw, "allowedOperations"),
        hints=tuple(raw.get("hints") or ()),
    )


def hydrate_levels(raw_levels: Iterable[Mapping[str, Any]]) -> List[LevelDefinition]:
    return [hydrate_level(raw) for raw in raw_levels]


def load_level_file(path: PathLike) -> List[LevelDefinition]:
    """
    Load a JSON file holding either one level object or a list of them.
    """
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise LevelFormatError(f"{p}: invalid JSON: {exc}") from exc

    raw_levels = data if isinstance(data, list) else [data]
    levels = hydrate_levels(raw_levels)
    logger.info(f"Loaded {len(levels)} level(s) from {p}")
    return levels
