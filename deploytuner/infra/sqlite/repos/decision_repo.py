"""SQLite repository for decision audit rows (decisions).

Responsibilities:
  - Insert one row per evaluated decision, keyed by a generated decision id.
  - Track execution/approval status updates for a decision.
Must not:
  - Re-evaluate policy; the payload is stored as produced.
"""

from __future__ import annotations

import datetime
import json
import logging
import sqlite3
import uuid
from typing import Any, Mapping, Optional

from deploytuner.core.domain.enums import ExecutionStatus, level_weight, parse_level

logger = logging.getLogger(__name__)


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def priority_action_dict(actions: list[Mapping[str, Any]]) -> Mapping[str, Any]:
    best = actions[0]
    best_weight = level_weight(parse_level(best.get("level")))
    for action in actions[1:]:
        weight = level_weight(parse_level(action.get("level")))
        if weight > best_weight:
            best = action
            best_weight = weight
    return best


class DecisionRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert_decision(
        self,
        payload: Mapping[str, Any],
        decision_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> str:
        actions = [a for a in (payload.get("actions") or []) if isinstance(a, Mapping)]
        if not actions:
            raise ValueError("Decision payload contains no actions to log.")

        priority = priority_action_dict(actions)
        context = payload.get("contextSnapshot") or {}
        adaptive = context.get("adaptiveConfig") or {}
        confidence = adaptive.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.0

        decision_id = decision_id or str(uuid.uuid4())
        created_at = created_at or _utc_now_iso()
        self._conn.execute(
            """
            INSERT INTO decisions (
                decision_id,
                project,
                intent,
                context_json,
                action,
                parameters_json,
                confidence,
                trace_json,
                actions_json,
                decision_timestamp,
                execution_status,
                created_at,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                decision_id,
                str(context.get("project") or ""),
                priority.get("label") or "No intent specified",
                _dumps(context),
                priority.get("id") or "no-action",
                _dumps(priority.get("payload") or {}),
                float(confidence),
                _dumps(payload.get("trace") or []),
                _dumps(actions),
                str(payload.get("decisionTimestamp") or created_at),
                ExecutionStatus.PENDING.value,
                created_at,
                created_at,
            ),
        )
        return decision_id

    def get_decision(self, decision_id: str) -> Optional[dict[str, Any]]:
        row = self._conn.execute(
            """
            SELECT decision_id, project, intent, context_json, action, parameters_json,
                   confidence, trace_json, actions_json, decision_timestamp,
                   execution_status, approved_by, notes, result_json, executed_at,
                   created_at, updated_at
            FROM decisions
            WHERE decision_id=?
            """,
            (decision_id,),
        ).fetchone()
        if row is None:
            return None
        keys = (
            "decision_id", "project", "intent", "context_json", "action", "parameters_json",
            "confidence", "trace_json", "actions_json", "decision_timestamp",
            "execution_status", "approved_by", "notes", "result_json", "executed_at",
            "created_at", "updated_at",
        )
        record = {key: row[i] for i, key in enumerate(keys)}
        for key in ("context_json", "parameters_json", "trace_json", "actions_json", "result_json"):
            raw = record.pop(key)
            record[key[: -len("_json")]] = json.loads(raw) if raw else None
        return record

    def update_execution(
        self,
        decision_id: str,
        status: ExecutionStatus,
        approved_by: str,
        notes: Optional[str] = None,
        result: Optional[Mapping[str, Any]] = None,
    ) -> int:
        now = _utc_now_iso()
        cursor = self._conn.execute(
            """
            UPDATE decisions
            SET execution_status=?,
                executed_at=?,
                approved_by=?,
                notes=?,
                result_json=?,
                updated_at=?
            WHERE decision_id=?
            """,
            (
                status.value,
                now,
                approved_by,
                notes,
                _dumps(dict(result)) if result is not None else None,
                now,
                decision_id,
            ),
        )
        if cursor.rowcount == 0:
            logger.warning("No decision found with id %s to update", decision_id)
        return cursor.rowcount

    def count_for_project(self, project: str) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) FROM decisions WHERE project=?",
            (project,),
        ).fetchone()
        return int(row[0])
