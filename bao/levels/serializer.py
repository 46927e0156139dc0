# bao/levels/serializer.py
"""
Forms back to raw level JSON, in a canonical order.

Siblings and roots are sorted by canonical signature, so two structurally
equivalent forests serialize identically whatever their ids and order.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Tuple

from ..core.form import Form, _postorder


def _serialize(form: Form) -> Tuple[str, Dict[str, Any]]:
    """Signature and raw node of `form`, built children first with an explicit stack."""
    built: Dict[int, Tuple[str, Dict[str, Any]]] = {}
    for node in _postorder(form):
        children = sorted((built[id(c)] for c in node.children), key=lambda pair: pair[0])
        sig = f"{node.boundary}:{node.label or ''}[{','.join(s for s, _ in children)}]"
        raw: Dict[str, Any] = {
            "boundary": node.boundary,
            "children": [c for _, c in children],
        }
        if node.label is not None:
            raw["label"] = node.label
        built[id(node)] = (sig, raw)
    return built[id(form)]


def serialize_form(form: Form) -> Dict[str, Any]:
    return _serialize(form)[1]


def serialize_forms(forms: Iterable[Form]) -> List[Dict[str, Any]]:
    pairs = sorted((_serialize(f) for f in forms), key=lambda pair: pair[0])
    return [raw for _, raw in pairs]


def format_forms_as_json(forms: Iterable[Form]) -> str:
    return json.dumps(serialize_forms(forms), indent=2)
