from __future__ import annotations

"""
bao_cli.py

Umbrella CLI router for bao tools.

This file stays thin and does not re-implement leaf flags.
It only routes:

  bao run <...>      -> bao.session_run_cli.main(<...>)
  bao levels         -> list built-in levels (id, name, axioms)

All remaining arguments are forwarded verbatim.
"""

import sys
from typing import List


HELP = """\
usage: bao <run|levels> ...

bao umbrella CLI (routes to the session runner and lists built-in levels).

commands:
  run        Delegate to: python -m bao.session_run_cli ...
  levels     List built-in levels

examples:
  python3 -m bao.bao_cli levels
  python3 -m bao.bao_cli run --schema
  python3 -m bao.bao_cli run level-01 '[{"type":"clarify","targetId":"0"}]' --pretty
"""


def _help(code: int = 0) -> int:
    print(HELP)
    return code


def _levels() -> int:
    from bao.levels.builtin import get_level, list_level_names

    for level_id in list_level_names():
        level = get_level(level_id)
        axioms = ",".join(level.allowed_axioms or ()) or "all"
        print(f"{level.id}\t{level.name}\t{axioms}")
    return 0


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if not argv or argv[0] in ("-h", "--help", "help"):
        return _help(0)

    top, rest = argv[0], argv[1:]

    if top == "run":
        from bao.session_run_cli import main as session_run_main

        return int(session_run_main(rest))

    if top == "levels":
        return _levels()

    print(f"bao: unknown command: {top!r}", file=sys.stderr)
    return _help(2)


if __name__ == "__main__":
    raise SystemExit(main())
