"""SQLite repository for deployment feedback and accuracy summaries.

Responsibilities:
  - Record whether a recommended config led to a successful deployment.
  - Aggregate a project's recent history into a FeedbackSummary.

Invariants:
  - Accuracy figures are percentages (0-100); the context builder normalizes them.
  - Trend days without feedback report accuracy None, not 0.
"""

from __future__ import annotations

import datetime
import json
import sqlite3
import uuid
from typing import Literal, Mapping, Optional

import numpy as np

from deploytuner.app_api.dto import FeedbackSummary, TrendPoint

Actor = Literal["auto", "operator"]


def _parse_ts(value: str) -> datetime.datetime:
    parsed = datetime.datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


class FeedbackRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add_record(
        self,
        project: str,
        environment: str,
        decision: Mapping[str, object],
        success: bool,
        actor: Actor,
        notes: Optional[str] = None,
        created_at: Optional[str] = None,
        record_id: Optional[str] = None,
    ) -> str:
        if not project or not project.strip():
            raise ValueError("project must be non-empty")
        if actor not in ("auto", "operator"):
            raise ValueError("actor must be 'auto' or 'operator'")
        confidence = decision.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = None

        record_id = record_id or str(uuid.uuid4())
        created_at = created_at or datetime.datetime.now(datetime.timezone.utc).isoformat()
        self._conn.execute(
            """
            INSERT INTO feedback (
                id,
                project,
                environment,
                decision_json,
                success,
                confidence,
                actor,
                notes,
                created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record_id,
                project,
                environment,
                json.dumps(dict(decision), separators=(",", ":"), ensure_ascii=False),
                1 if success else 0,
                confidence,
                actor,
                notes,
                created_at,
            ),
        )
        return record_id

    def summary(
        self,
        project: str,
        days: int = 7,
        as_of: Optional[datetime.datetime] = None,
    ) -> FeedbackSummary:
        if days < 1:
            raise ValueError("days must be >= 1")
        end = as_of or datetime.datetime.now(datetime.timezone.utc)
        if end.tzinfo is None:
            end = end.replace(tzinfo=datetime.timezone.utc)
        first_day = end.date() - datetime.timedelta(days=days - 1)

        rows = self._conn.execute(
            """
            SELECT created_at, success, confidence
            FROM feedback
            WHERE project=?
            ORDER BY created_at ASC
            """,
            (project,),
        ).fetchall()

        dates: list[datetime.date] = []
        outcomes: list[float] = []
        confidences: list[float] = []
        for created_at, success, confidence in rows:
            try:
                ts = _parse_ts(created_at)
            except (TypeError, ValueError):
                continue
            day = ts.astimezone(datetime.timezone.utc).date()
            if day < first_day or ts > end:
                continue
            dates.append(day)
            outcomes.append(1.0 if success else 0.0)
            if confidence is not None:
                confidences.append(float(confidence))

        success_arr = np.asarray(outcomes, dtype=float)
        total = int(success_arr.size)
        success_count = int(np.sum(success_arr)) if total else 0
        accuracy_rate = float(np.mean(success_arr) * 100.0) if total else 0.0
        average_confidence = float(np.mean(confidences)) if confidences else None

        trend: list[TrendPoint] = []
        day_arr = np.asarray([d.toordinal() for d in dates], dtype=np.int64)
        for offset in range(days):
            day = first_day + datetime.timedelta(days=offset)
            mask = day_arr == day.toordinal()
            if not np.any(mask):
                trend.append(TrendPoint(label=day.isoformat(), accuracy=None))
                continue
            trend.append(
                TrendPoint(label=day.isoformat(), accuracy=float(np.mean(success_arr[mask]) * 100.0))
            )

        return FeedbackSummary(
            accuracy_rate=accuracy_rate,
            total=total,
            success_count=success_count,
            average_confidence=average_confidence,
            trend=tuple(trend),
        )
