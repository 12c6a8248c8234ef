"""Construct a fully wired tuner instance.

Responsibilities:
  - Assemble the policy tree, feedback summary provider and audit sink.
Must not:
  - Implement policy or translation logic; composition only.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterable, Optional

from deploytuner.app_api.facade import AdaptiveTunerApplication
from deploytuner.app_api.factories.policy_factory import build_policy
from deploytuner.core.engine.observers import EvaluationObserver
from deploytuner.infra.sqlite.audit_port_sqlite import (
    SqliteDecisionAuditSink,
    SqliteFeedbackSummaryProvider,
)


def build_tuner_app(
    conn: Optional[sqlite3.Connection] = None,
    policy_id: str = "idt_default",
    policy_version: str = "v1",
    thresholds_path: Optional[str | Path] = None,
    summary_days: int = 7,
    observers: Iterable[EvaluationObserver] = (),
) -> AdaptiveTunerApplication:
    """
    Composition root: wire the policy tree and, when a connection is given,
    SQLite-backed history and audit ports.
    """
    policy = build_policy(
        policy_id=policy_id,
        policy_version=policy_version,
        thresholds_path=thresholds_path,
    )
    summary_provider = None
    audit_sink = None
    if conn is not None:
        summary_provider = SqliteFeedbackSummaryProvider(conn, days=summary_days)
        audit_sink = SqliteDecisionAuditSink(conn)

    return AdaptiveTunerApplication(
        policy=policy,
        summary_provider=summary_provider,
        audit_sink=audit_sink,
        observers=observers,
        policy_id=policy_id,
        policy_version=policy_version,
    )
