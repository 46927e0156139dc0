from __future__ import annotations

import hashlib
import json
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .core.form import Form, canonical_signature_forest

TRACE_EVENT_V1 = 1

# Feature flag: set BAO_TRACE=1 to record session events by default
BAO_TRACE_ENABLED = os.environ.get("BAO_TRACE", "0") == "1"

SESSION_EVENT_TYPES = frozenset([
    "level.loaded",
    "level.reset",
    "operation.applied",
    "operation.stall",
    "operation.rejected",
    "history.undo",
    "history.redo",
    "level.won",
])


def _deep_sort_json(x: Any) -> Any:
    """
    Deterministically normalize nested JSON-ish structures:
    - dict: keys sorted lexicographically; values deep-sorted
    - list: values deep-sorted (order preserved)
    - primitives: unchanged
    """
    if isinstance(x, dict):
        return {str(k): _deep_sort_json(x[k]) for k in sorted(x.keys())}
    if isinstance(x, list):
        return [_deep_sort_json(v) for v in x]
    return x


def canon_event(ev: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Canonicalize a single trace event to a deterministic dict.

    Required:
    - v: const 1
    - type: one of SESSION_EVENT_TYPES
    - i: integer >= 0

    Optional:
    - t: stable tag (level id or operation key)
    - mu: payload (deep-sorted if dict/list)
    - meta: metadata (deep-sorted)

    Optional keys with a None value are dropped, unknown keys are ignored,
    and top-level key order is fixed.
    """
    if not isinstance(ev, Mapping):
        raise TypeError(f"event must be a mapping, got {type(ev)}")

    v = ev.get("v", TRACE_EVENT_V1)
    if v != TRACE_EVENT_V1:
        raise ValueError(f"event.v must be {TRACE_EVENT_V1}, got {v!r}")

    typ = ev.get("type")
    if typ not in SESSION_EVENT_TYPES:
        raise ValueError(f"event.type must be one of {sorted(SESSION_EVENT_TYPES)}, got {typ!r}")

    i = ev.get("i")
    if not isinstance(i, int) or isinstance(i, bool) or i < 0:
        raise ValueError("event.i must be an integer >= 0")

    t = ev.get("t", None)
    if t is not None and (not isinstance(t, str) or not t.strip()):
        raise ValueError("event.t must be a non-empty string when provided")

    mu = ev.get("mu", None)
    if isinstance(mu, (dict, list)):
        mu = _deep_sort_json(mu)

    meta = ev.get("meta", None)
    if meta is not None:
        if not isinstance(meta, Mapping):
            raise ValueError("event.meta must be an object/dict when provided")
        meta = _deep_sort_json(dict(meta))

    out: Dict[str, Any] = {"v": v, "type": typ, "i": i}
    if t is not None:
        out["t"] = t
    if mu is not None:
        out["mu"] = mu
    if meta is not None:
        out["meta"] = meta
    return out


def canon_events(events: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Canonicalize a sequence of events and enforce contiguous index ordering by `i`.
    Indices are checked, never renumbered.
    """
    out = [canon_event(ev) for ev in events]
    got = [e["i"] for e in out]
    expected = list(range(len(out)))
    if got != expected:
        raise ValueError(
            f"event.i must be contiguous 0..n-1 in-order; got {got}, expected {expected}"
        )
    return out


def canon_jsonl(events: Iterable[Mapping[str, Any]]) -> str:
    """Canonical events as JSONL (one event per line, newline-terminated)."""
    lines = [
        json.dumps(e, ensure_ascii=False, separators=(",", ":"), sort_keys=False)
        for e in canon_events(events)
    ]
    return "\n".join(lines) + ("\n" if lines else "")


def forest_hash(forest: Sequence[Form]) -> str:
    """
    Short, id-independent hash of a forest: first 16 hex chars of the SHA-256
    of its sorted canonical signature list.
    """
    canonical = json.dumps(canonical_signature_forest(forest), separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


class TraceObserver:
    """
    Collects session events with contiguous indices.

    Feature flag: BAO_TRACE=1 enables collection when no explicit `enabled`
    is given. When disabled, every method is a no-op.
    """

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self._events: List[Dict[str, Any]] = []
        self._enabled = enabled if enabled is not None else BAO_TRACE_ENABLED

    @property
    def enabled(self) -> bool:
        return self._enabled

    def emit(self, event_type: str, t: Optional[str] = None, mu: Any = None) -> None:
        if not self._enabled:
            return
        ev: Dict[str, Any] = {"v": TRACE_EVENT_V1, "type": event_type, "i": len(self._events)}
        if t is not None:
            ev["t"] = t
        if mu is not None:
            ev["mu"] = mu
        self._events.append(canon_event(ev))

    def level_loaded(self, level_id: str, start: Sequence[Form], goal: Sequence[Form]) -> None:
        self.emit("level.loaded", t=level_id, mu={"forest": forest_hash(start), "goal": forest_hash(goal)})

    def level_reset(self, level_id: str, start: Sequence[Form]) -> None:
        self.emit("level.reset", t=level_id, mu={"forest": forest_hash(start)})

    def applied(self, key: str, before: Sequence[Form], after: Sequence[Form], move: int) -> None:
        self.emit(
            "operation.applied",
            t=key,
            mu={"after": forest_hash(after), "before": forest_hash(before), "move": move},
        )

    def stall(self, key: str, forest: Sequence[Form], reason: str) -> None:
        """Operation allowed but the forest would not change."""
        self.emit("operation.stall", t=key, mu={"forest": forest_hash(forest), "reason": reason})

    def rejected(self, key: str, reason: str) -> None:
        """Operation refused before reaching the dispatcher's axioms."""
        self.emit("operation.rejected", t=key, mu={"reason": reason})

    def undo(self, forest: Sequence[Form]) -> None:
        self.emit("history.undo", mu={"forest": forest_hash(forest)})

    def redo(self, forest: Sequence[Form]) -> None:
        self.emit("history.redo", mu={"forest": forest_hash(forest)})

    def won(self, level_id: str, move: int) -> None:
        self.emit("level.won", t=level_id, mu={"move": move})

    def get_events(self) -> List[Dict[str, Any]]:
        """Return collected events (canonicalized)."""
        return [dict(ev) for ev in self._events]

    def reset(self) -> None:
        self._events = []
