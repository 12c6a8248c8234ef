"""Evaluate the policy tree for one context and print the resulting AdaptiveConfig.

Purpose:
  - Run the decision tree against a context snapshot, or against raw health/host/log
    inputs, and show the deploy policy it recommends.
Inputs:
  - --context: camelCase DecisionContext JSON, or
  - --inputs: JSON with project, health, systemInfo and logs.
Outputs:
  - AdaptiveConfig JSON on stdout; trace lines with --trace.
  - With --db, decisions are recorded and history is read from the audit database.
Example:
  - python -m deploytuner.cli.evaluate_decision --context ctx.json --trace
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from deploytuner.app_api.context_builder import context_from_dict
from deploytuner.app_api.dto import SystemHealthInsight, VpsLogEntry, VpsSystemInfo
from deploytuner.app_api.factories import build_policy, build_tuner_app
from deploytuner.core.engine.evaluator import evaluate_decision_tree
from deploytuner.core.engine.result import DecisionResult
from deploytuner.core.tuner.translator import translate_actions_to_config
from deploytuner.infra.sqlite.audit_port_sqlite import SqliteDecisionAuditSink
from deploytuner.infra.sqlite.db import get_connection, resolve_db_path
from deploytuner.infra.sqlite.migrator import apply_migrations


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate the deploy decision tree")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--context", help="DecisionContext JSON file")
    source.add_argument("--inputs", help="JSON file with project, health, systemInfo, logs")
    parser.add_argument("--policy-id", default="idt_default", help="Policy id")
    parser.add_argument("--policy-version", default="v1", help="Policy version")
    parser.add_argument("--thresholds", help="Policy thresholds JSON file")
    parser.add_argument("--db", help="Audit SQLite path (defaults to $DEPLOYTUNER_DB when --record)")
    parser.add_argument("--record", action="store_true", help="Record the decision in the audit database")
    parser.add_argument("--trace", action="store_true", help="Print the evaluation trace")
    parser.add_argument("--verbose", action="store_true", help="Enable info logging")
    return parser.parse_args(argv)


def _load_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def print_trace(decision: DecisionResult) -> None:
    for entry in decision.trace:
        print(f"TRACE node={entry.node_id} matched={entry.matched} reason={entry.reason}")
    print(f"ACTIONS {','.join(decision.action_ids())}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    db_path = args.db or (resolve_db_path() if args.record else None)
    conn = None
    if db_path:
        conn = get_connection(db_path)
        apply_migrations(conn)
        conn.commit()

    try:
        try:
            if args.context:
                ctx = context_from_dict(_load_json(args.context))
                policy = build_policy(
                    policy_id=args.policy_id,
                    policy_version=args.policy_version,
                    thresholds_path=args.thresholds,
                )
                decision = evaluate_decision_tree(policy, ctx)
                if conn is not None:
                    SqliteDecisionAuditSink(conn).record_decision(decision.as_audit_payload())
                config = translate_actions_to_config(list(decision.actions))
            else:
                payload = _load_json(args.inputs)
                if not isinstance(payload, dict):
                    raise ValueError("inputs must be a JSON object")
                raw_logs = payload.get("logs") or []
                if not isinstance(raw_logs, list):
                    raise ValueError("inputs logs must be a list")
                app = build_tuner_app(
                    conn,
                    policy_id=args.policy_id,
                    policy_version=args.policy_version,
                    thresholds_path=args.thresholds,
                )
                config = app.get_adaptive_config(
                    SystemHealthInsight.from_dict(payload.get("health") or {}),
                    VpsSystemInfo.from_dict(payload.get("systemInfo") or {}),
                    [VpsLogEntry.from_dict(item) for item in raw_logs],
                    str(payload.get("project") or ""),
                )
                decision = app.last_decision
        except (OSError, ValueError) as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2

        if args.trace and decision is not None:
            print_trace(decision)
        print(json.dumps(config.as_dict(), indent=2, ensure_ascii=False))
        return 0
    finally:
        if conn is not None:
            conn.close()


if __name__ == "__main__":
    sys.exit(main())
