"""Assemble a DecisionContext from health, host metrics, logs and feedback history.

Responsibilities:
  - Derive outcome, CPU proxy and failed health-check count from live inputs.
  - Fold the project's historical accuracy into the recent trend.
  - Parse caller-supplied context JSON for CLI and test use.

Invariants:
  - build_decision_context never raises because history is unavailable;
    missing history is treated optimistically (accuracy 1.0).
  - Only SUCCESS or FAIL are derived here; PARTIAL/UNKNOWN come only from explicit input.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence

from deploytuner.core.domain.enums import Outcome, parse_outcome
from deploytuner.core.domain.models import DailyAccuracy, DecisionContext, Metrics, RecentTrend
from .dto import FeedbackSummary, SystemHealthInsight, VpsLogEntry, VpsSystemInfo
from .ports import FeedbackSummaryProvider

logger = logging.getLogger(__name__)

HEALTH_CHECK_FAILED_MARKER = "health check failed"
LOAD_TO_CPU_FACTOR = 10.0
FULL_SUCCESS_RATE = 100.0
DEFAULT_ACCURACY = 1.0

_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def cpu_from_load_avg(load_avg: Sequence[float]) -> float:
    if not load_avg:
        return 0.0
    return _clamp(round(float(load_avg[0]), 2) * LOAD_TO_CPU_FACTOR, 0.0, 100.0)


def memory_from_text(memory: str) -> float:
    match = _LEADING_FLOAT.match(memory or "")
    if match is None:
        return 0.0
    return _clamp(float(match.group(1)), 0.0, 100.0)


def count_failed_health_checks(logs: Sequence[VpsLogEntry]) -> int:
    return sum(1 for entry in logs if HEALTH_CHECK_FAILED_MARKER in (entry.text or "").lower())


def _fetch_summary(
    provider: Optional[FeedbackSummaryProvider], project: str
) -> Optional[FeedbackSummary]:
    if provider is None:
        return None
    try:
        return provider.get_summary(project)
    except Exception as exc:
        logger.warning("Feedback summary unavailable for %s: %s", project, exc)
        return None


def trend_from_summary(summary: Optional[FeedbackSummary]) -> RecentTrend:
    if summary is None:
        return RecentTrend(accuracy_7d=DEFAULT_ACCURACY)
    daily = tuple(
        DailyAccuracy(date=point.label, accuracy=_clamp(point.accuracy / 100.0, 0.0, 1.0))
        for point in summary.trend
        if point.accuracy is not None
    )
    return RecentTrend(
        accuracy_7d=_clamp(summary.accuracy_rate / 100.0, 0.0, 1.0),
        daily_accuracy=daily,
    )


def build_decision_context(
    project: str,
    health: SystemHealthInsight,
    system_info: VpsSystemInfo,
    logs: Sequence[VpsLogEntry],
    summary_provider: Optional[FeedbackSummaryProvider] = None,
) -> DecisionContext:
    summary = _fetch_summary(summary_provider, project)
    success_rate = health.metrics.success_rate
    return DecisionContext(
        project=project,
        outcome=Outcome.FAIL if success_rate < FULL_SUCCESS_RATE else Outcome.SUCCESS,
        metrics=Metrics(
            success_rate=success_rate,
            avg_deploy_time=health.metrics.avg_deploy_time,
            cpu=cpu_from_load_avg(system_info.load_avg),
            memory=memory_from_text(system_info.memory),
            health_checks_failed=count_failed_health_checks(logs),
        ),
        recent_trend=trend_from_summary(summary),
    )


_METRIC_KEYS = {
    "cpu": "cpu",
    "memory": "memory",
    "latencyMs": "latency_ms",
    "errorRate": "error_rate",
    "diskAvailPct": "disk_avail_pct",
    "healthChecksFailed": "health_checks_failed",
    "successRate": "success_rate",
    "avgDeployTime": "avg_deploy_time",
}


def context_from_dict(payload: Mapping[str, Any]) -> DecisionContext:
    """Parse a camelCase context snapshot; raises ValueError on invalid input."""
    if not isinstance(payload, Mapping):
        raise ValueError("context must be a JSON object")

    metrics: Optional[Metrics] = None
    raw_metrics = payload.get("metrics")
    if raw_metrics is not None:
        if not isinstance(raw_metrics, Mapping):
            raise ValueError("metrics must be an object")
        values: dict[str, Any] = {}
        for key, attr in _METRIC_KEYS.items():
            if raw_metrics.get(key) is not None:
                values[attr] = raw_metrics[key]
        metrics = Metrics(**values)

    trend: Optional[RecentTrend] = None
    raw_trend = payload.get("recentTrend")
    if raw_trend is not None:
        if not isinstance(raw_trend, Mapping):
            raise ValueError("recentTrend must be an object")
        raw_daily = raw_trend.get("dailyAccuracy") or []
        if not isinstance(raw_daily, (list, tuple)):
            raise ValueError("dailyAccuracy must be a list")
        daily = []
        for day in raw_daily:
            if not isinstance(day, Mapping):
                raise ValueError("dailyAccuracy entries must be objects")
            accuracy = day.get("accuracy")
            if isinstance(accuracy, bool) or not isinstance(accuracy, (int, float)):
                raise ValueError("dailyAccuracy.accuracy must be numeric")
            daily.append(DailyAccuracy(date=str(day.get("date") or ""), accuracy=float(accuracy)))
        trend = RecentTrend(accuracy_7d=raw_trend.get("accuracy7d"), daily_accuracy=tuple(daily))

    adaptive = payload.get("adaptiveConfig")
    if adaptive is not None and not isinstance(adaptive, Mapping):
        raise ValueError("adaptiveConfig must be an object")
    override = payload.get("operatorOverride")
    if override is not None and not isinstance(override, bool):
        raise ValueError("operatorOverride must be a boolean")

    ctx = DecisionContext(
        project=payload.get("project"),
        outcome=parse_outcome(payload.get("outcome")),
        metrics=metrics,
        recent_trend=trend,
        adaptive_config=dict(adaptive) if adaptive is not None else None,
        operator_override=override,
    )
    ctx.validate()
    return ctx
