from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from deploytuner.app_api.dto import FeedbackSummary
from deploytuner.app_api.ports import DecisionAuditSink, FeedbackSummaryProvider
from .repos.decision_repo import DecisionRepo
from .repos.feedback_repo import FeedbackRepo

logger = logging.getLogger(__name__)


class SqliteDecisionAuditSink(DecisionAuditSink):
    """SQLite-backed audit sink for evaluated decisions.

    Failure contract: never raises. A failed write is rolled back, logged and
    reported as None so deployment decisions never depend on the audit log.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._repo = DecisionRepo(conn)

    def record_decision(self, payload: dict[str, Any]) -> Optional[str]:
        try:
            if not self._conn.in_transaction:
                self._conn.execute("BEGIN")
            decision_id = self._repo.insert_decision(payload)
            self._conn.commit()
        except Exception:
            try:
                self._conn.rollback()
            except sqlite3.Error:
                logger.debug("Rollback after failed audit write also failed")
            project = (payload.get("contextSnapshot") or {}).get("project")
            logger.exception("Failed to record decision for project %s", project)
            return None
        logger.info("Recorded decision %s", decision_id)
        return decision_id


class SqliteFeedbackSummaryProvider(FeedbackSummaryProvider):
    """Reads a project's recent feedback into a FeedbackSummary.

    Returns None when the project has no feedback at all, so callers fall back
    to their optimistic default instead of reading 0% accuracy.
    """

    def __init__(self, conn: sqlite3.Connection, days: int = 7) -> None:
        self._repo = FeedbackRepo(conn)
        self._days = days

    def get_summary(self, project: str) -> Optional[FeedbackSummary]:
        if not project:
            return None
        summary = self._repo.summary(project, days=self._days)
        if summary.total == 0:
            return None
        return summary
