from __future__ import annotations

"""
Bao Session Run CLI

Loads a level (built-in id or JSON level file), applies a list of operation
JSON objects to it one at a time, and emits the outcome as JSON.

Forms are addressed either by id or by index path: "0" is the first root,
"0.1" the second child of the first root. Paths are resolved against the
forest as it stands when each step runs; children are in stored order.

Contract: emits JSON with schema tag + schema_doc.
"""

import argparse
import datetime
import hashlib
import json
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from bao.availability import ROOT_NODE_ID
from bao.core.form import Form
from bao.levels.builtin import get_level, get_raw_level, has_level, list_level_names
from bao.levels.loader import load_level_file
from bao.levels.serializer import serialize_forms
from bao.levels.types import LevelDefinition, LevelFormatError
from bao.operations import operation_from_json, operation_to_json
from bao.session import GameSession


SCHEMA_TAG = "bao-session-run.v1"
SCHEMA_DOC = "docs/session_run_schema.md"

DEFAULT_LOG_LEVEL = os.environ.get("BAO_LOG_LEVEL", "WARNING")

_PATH_RE = re.compile(r"^\d+(\.\d+)*$")
_ID_FIELDS = ("targetId", "squareId", "frameId", "parentId")
_ID_LIST_FIELDS = ("targetIds", "contentIds", "templateIds")

logger = logging.getLogger("bao.session_run_cli")


def _utc_now_z() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def _inputs_hash(level: Any, ops: List[Any], sandbox: bool) -> str:
    payload = json.dumps(
        {"level": level, "ops": ops, "sandbox": sandbox},
        separators=(",", ":"),
        ensure_ascii=False,
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _parse_ops_from_json_text(text: str) -> List[Dict[str, Any]]:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Operations must be JSON. Parse error: {e}") from e

    if not isinstance(obj, list):
        raise ValueError('Operations JSON must be a list of objects (e.g. [{"type": "clarify", "targetId": "0"}]).')
    for i, op in enumerate(obj):
        if not isinstance(op, dict):
            raise ValueError(f"Operation[{i}] is not an object: {op!r}")
    return obj


def _read_ops_json(args: argparse.Namespace) -> List[Dict[str, Any]]:
    """
    Priority:
      1) positional ops_json (if provided)
      2) --ops-file
      3) --stdin
      4) no operations
    """
    if args.ops_json is not None:
        return _parse_ops_from_json_text(args.ops_json)

    if args.ops_file is not None:
        with args.ops_file as fh:
            return _parse_ops_from_json_text(fh.read())

    if args.stdin:
        return _parse_ops_from_json_text(sys.stdin.read())

    return []


def _load_level(ref: str, level_id: Optional[str]) -> tuple[LevelDefinition, Any]:
    """Resolve a built-in id or a level file path; returns the level and its hash input."""
    if has_level(ref):
        return get_level(ref), get_raw_level(ref)

    path = Path(ref)
    if not path.is_file():
        raise ValueError(f"Unknown level {ref!r}: not a built-in level id or a readable file")
    levels = load_level_file(path)
    if not levels:
        raise ValueError(f"{path}: no levels in file")
    if level_id is None:
        chosen = levels[0]
    else:
        matches = [lvl for lvl in levels if lvl.id == level_id]
        if not matches:
            raise ValueError(f"{path}: no level with id {level_id!r}")
        chosen = matches[0]
    return chosen, {"file": path.read_text(encoding="utf-8"), "id": chosen.id}


def _resolve_path(forest: Sequence[Form], ref: str) -> Optional[str]:
    nodes: Sequence[Form] = forest
    found: Optional[Form] = None
    for part in ref.split("."):
        index = int(part)
        if index >= len(nodes):
            return None
        found = nodes[index]
        nodes = found.children
    return found.id if found is not None else None


def _resolve_refs(forest: Sequence[Form], raw: Dict[str, Any], warnings: List[str], step: int) -> Dict[str, Any]:
    """Copy of `raw` with index paths replaced by the ids they address.

    A `parentId` of ROOT_NODE_ID names the root forest and becomes None.
    """

    def resolve(ref: Any) -> Any:
        if not isinstance(ref, str) or not _PATH_RE.match(ref):
            return ref
        resolved = _resolve_path(forest, ref)
        if resolved is None:
            warnings.append(f"step {step}: path {ref!r} does not address a form")
            return ref
        return resolved

    out = dict(raw)
    if out.get("parentId") == ROOT_NODE_ID:
        out["parentId"] = None
    for field in _ID_FIELDS:
        if field in out:
            out[field] = resolve(out[field])
    for field in _ID_LIST_FIELDS:
        if isinstance(out.get(field), list):
            out[field] = [resolve(v) for v in out[field]]
    return out


def _emit(payload: dict[str, Any], pretty: bool) -> None:
    if pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Run operations against a bao level and emit the session outcome as JSON.")
    ap.add_argument("--schema", action="store_true", help="Print schema tag + schema doc path and exit.")
    ap.add_argument("--list", action="store_true", help="List built-in level ids and exit.")
    ap.add_argument("--pretty", action="store_true", help="Pretty-print JSON output.")
    ap.add_argument("--stdin", action="store_true", help="Read operations JSON from stdin.")
    ap.add_argument(
        "--ops-file",
        type=argparse.FileType("r", encoding="utf-8"),
        default=None,
        help="Read operations JSON from a file (expects a JSON list of operation objects).",
    )
    ap.add_argument("--level-id", default=None, help="Pick a level by id when the level file holds several.")
    ap.add_argument("--sandbox", action="store_true", help="Enable sandbox operations (addBoundary, addVariable).")
    ap.add_argument("--trace", action="store_true", help="Include session trace events in the output.")
    ap.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Logging level (default: $BAO_LOG_LEVEL or WARNING).")

    ap.add_argument("level", nargs="?", help="Built-in level id (e.g. level-01) or path to a level JSON file")
    ap.add_argument(
        "ops_json",
        nargs="?",
        default=None,
        help='Operations JSON list, e.g. \'[{"type":"clarify","targetId":"0"}]\'. Optional if using --stdin/--ops-file.',
    )

    args = ap.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    if args.schema:
        print(f"{SCHEMA_TAG} {SCHEMA_DOC}")
        return 0

    if args.list:
        for name in list_level_names():
            print(name)
        print('python3 -m bao.session_run_cli level-01 \'[{"type":"clarify","targetId":"0"}]\' --pretty')
        return 0

    if not args.level:
        ap.error("level is required unless --schema or --list is used")

    try:
        raw_ops = _read_ops_json(args)
        level, level_hash_input = _load_level(args.level, args.level_id)
    except (ValueError, LevelFormatError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    session = GameSession(sandbox_enabled=args.sandbox, trace=args.trace)
    session.load_level(level)

    warnings: List[str] = []
    steps: List[Dict[str, Any]] = []
    for i, raw in enumerate(raw_ops):
        resolved = _resolve_refs(session.current, raw, warnings, i)
        try:
            op = operation_from_json(resolved)
        except ValueError as e:
            print(f"Invalid input: operation[{i}]: {e}", file=sys.stderr)
            return 2
        result = session.apply_operation(op)
        steps.append({
            "index": i,
            "op": operation_to_json(op),
            "applied": result.applied,
            "reason": result.reason,
            "status": session.status,
            "moves": session.move_count,
        })

    payload: dict[str, Any] = {
        "schema": SCHEMA_TAG,
        "schema_doc": SCHEMA_DOC,
        "level": {"id": level.id, "name": level.name},
        "steps": steps,
        "forest": serialize_forms(session.current),
        "goal": serialize_forms(session.goal),
        "status": session.status,
        "won": session.is_won(),
        "moves": session.move_count,
        "ok": True,
        "warnings": warnings,
        "trace": session.trace_events(),
        "meta": {
            "tool": "session_run_cli",
            "generated_at": _utc_now_z(),
            "determinism": {
                "inputs_hash": _inputs_hash(level_hash_input, raw_ops, args.sandbox),
            },
        },
    }

    _emit(payload, pretty=bool(args.pretty))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
