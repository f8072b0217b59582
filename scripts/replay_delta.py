#!/usr/bin/env python3
"""
Replays a stored delta notification through the rating pipeline.

Useful to repair averages after the service missed notifications, or to
check what a captured payload would touch without going through HTTP.

Example:
    python scripts/replay_delta.py captured-delta.json
    cat captured-delta.json | python scripts/replay_delta.py --dry-run
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rating_service.bootstrap import build_context
from rating_service.errors import DeltaFormatError
from rating_service.models import parse_delta
from rating_service.services.logging import configure_logging


def _load(path: str) -> object:
    if path == "-":
        return json.load(sys.stdin)
    return json.loads(Path(path).read_text(encoding="utf-8"))


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a delta payload against the configured store")
    parser.add_argument("path", nargs="?", default="-", help="JSON file with the delta payload (default: stdin)")
    parser.add_argument("--dry-run", action="store_true", help="Only list the targets that would be recomputed")
    args = parser.parse_args()

    ctx = build_context()
    configure_logging(level=ctx.config.log_level, fmt="text")
    try:
        batch = parse_delta(_load(args.path), default_graph=ctx.config.graph, strict=True)
    except DeltaFormatError as exc:
        print(f"Cannot replay {args.path}: {exc}", file=sys.stderr)
        return 2

    if args.dry_run:
        print(json.dumps({"targets": ctx.pipeline.dirty_targets(batch)}, indent=2, ensure_ascii=False))
        return 0

    report = ctx.pipeline.process(batch)
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
