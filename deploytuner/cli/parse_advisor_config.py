"""Parse a raw advisor response into a validated AdaptiveConfig.

Purpose:
  - Show how an external advisor payload is interpreted before it reaches the scheduler.
Inputs:
  - --input: file with the raw response text, or "-" for stdin.
Outputs:
  - AdaptiveConfig JSON on stdout. Malformed input prints the manual-approval fallback.
Example:
  - echo '{"policy":"IMMEDIATE","confidence":0.9}' | python -m deploytuner.cli.parse_advisor_config --input -
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from deploytuner.core.tuner.providers import requires_manual_approval
from deploytuner.core.tuner.safe_parser import safe_parse_adaptive_config


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Safe-parse an advisor config response")
    parser.add_argument("--input", required=True, help="Raw response file, or - for stdin")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with code 1 when the parsed config requires manual approval",
    )
    return parser.parse_args(argv)


def _read_raw(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        raw = _read_raw(args.input)
    except OSError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    config = safe_parse_adaptive_config(raw)
    print(json.dumps(config.as_dict(), indent=2, ensure_ascii=False))
    if args.check and requires_manual_approval(config):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
