"""
Bao levels

- types: LevelDefinition and LevelFormatError
- loader: LEVEL_SCHEMA validation and hydration into live Forms
- serializer: Forms back to canonical raw JSON
- builtin: the built-in levels and a name -> raw level registry
"""

from .builtin import clear_registry, get_level, has_level, list_level_names, register_level
from .loader import LEVEL_SCHEMA, hydrate_level, hydrate_levels, instantiate_form, load_level_file
from .serializer import format_forms_as_json, serialize_form, serialize_forms
from .types import LevelDefinition, LevelFormatError

__all__ = [
    "LEVEL_SCHEMA",
    "LevelDefinition",
    "LevelFormatError",
    "clear_registry",
    "format_forms_as_json",
    "get_level",
    "has_level",
    "hydrate_level",
    "hydrate_levels",
    "instantiate_form",
    "list_level_names",
    "load_level_file",
    "register_level",
    "serialize_form",
    "serialize_forms",
]
