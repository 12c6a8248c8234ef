"""Domain models for decision evaluation and adaptive deploy policy.

Responsibilities:
  - Define immutable data carriers for contexts, policy-tree nodes, actions and configs.
  - Render camelCase snapshots for audit persistence and UI consumers.

Inputs/Outputs:
  - DecisionContext is built per evaluation; IDTNode trees are built once at startup.
  - AdaptiveConfig is the value object handed to schedulers and UI.

Invariants:
  - Models are frozen; evaluation must never mutate a context or a node.
  - Absent metric fields mean "no signal", never zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .enums import ActionLevel, AdaptivePolicy, ConditionKind, Outcome

JSONDict = dict[str, Any]


@dataclass(frozen=True)
class Metrics:
    cpu: Optional[float] = None
    memory: Optional[float] = None
    latency_ms: Optional[float] = None
    error_rate: Optional[float] = None
    disk_avail_pct: Optional[float] = None
    health_checks_failed: Optional[int] = None
    success_rate: Optional[float] = None
    avg_deploy_time: Optional[float] = None

    def as_dict(self) -> JSONDict:
        out: JSONDict = {}
        for key, value in (
            ("cpu", self.cpu),
            ("memory", self.memory),
            ("latencyMs", self.latency_ms),
            ("errorRate", self.error_rate),
            ("diskAvailPct", self.disk_avail_pct),
            ("healthChecksFailed", self.health_checks_failed),
            ("successRate", self.success_rate),
            ("avgDeployTime", self.avg_deploy_time),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class DailyAccuracy:
    date: str
    accuracy: float


@dataclass(frozen=True)
class RecentTrend:
    accuracy_7d: Optional[float] = None
    daily_accuracy: tuple[DailyAccuracy, ...] = ()

    def as_dict(self) -> JSONDict:
        out: JSONDict = {}
        if self.accuracy_7d is not None:
            out["accuracy7d"] = self.accuracy_7d
        if self.daily_accuracy:
            out["dailyAccuracy"] = [
                {"date": day.date, "accuracy": day.accuracy} for day in self.daily_accuracy
            ]
        return out


# (field, low, high); None means unbounded on that side.
_METRIC_BOUNDS: tuple[tuple[str, Optional[float], Optional[float]], ...] = (
    ("cpu", 0.0, 100.0),
    ("memory", 0.0, 100.0),
    ("latency_ms", 0.0, None),
    ("error_rate", 0.0, 1.0),
    ("disk_avail_pct", 0.0, 100.0),
    ("health_checks_failed", 0, None),
    ("success_rate", 0.0, 100.0),
    ("avg_deploy_time", 0.0, None),
)


@dataclass(frozen=True)
class DecisionContext:
    """Point-in-time snapshot fed to the decision tree. One per evaluation."""

    project: str
    outcome: Outcome
    metrics: Optional[Metrics] = None
    recent_trend: Optional[RecentTrend] = None
    adaptive_config: Optional[Mapping[str, Any]] = None
    # Informational only; no policy node reads it yet.
    operator_override: Optional[bool] = None

    def validate(self) -> None:
        if not isinstance(self.project, str) or not self.project.strip():
            raise ValueError("project must be a non-empty string")
        if not isinstance(self.outcome, Outcome):
            raise ValueError("outcome must be an Outcome")
        if self.metrics is not None:
            for name, low, high in _METRIC_BOUNDS:
                value = getattr(self.metrics, name)
                if value is None:
                    continue
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"metrics.{name} must be numeric")
                if math.isnan(value) or math.isinf(value):
                    raise ValueError(f"metrics.{name} must be finite")
                if low is not None and value < low:
                    raise ValueError(f"metrics.{name} must be >= {low}")
                if high is not None and value > high:
                    raise ValueError(f"metrics.{name} must be <= {high}")
            hc = self.metrics.health_checks_failed
            if hc is not None and not isinstance(hc, int):
                raise ValueError("metrics.health_checks_failed must be an integer")
        if self.recent_trend is not None:
            acc = self.recent_trend.accuracy_7d
            if acc is not None:
                if isinstance(acc, bool) or not isinstance(acc, (int, float)):
                    raise ValueError("recent_trend.accuracy_7d must be numeric")
                if not (0.0 <= acc <= 1.0):
                    raise ValueError("recent_trend.accuracy_7d must be within [0, 1]")

    def as_dict(self) -> JSONDict:
        out: JSONDict = {"project": self.project, "outcome": self.outcome.value}
        if self.metrics is not None:
            out["metrics"] = self.metrics.as_dict()
        if self.recent_trend is not None:
            out["recentTrend"] = self.recent_trend.as_dict()
        if self.adaptive_config is not None:
            out["adaptiveConfig"] = dict(self.adaptive_config)
        if self.operator_override is not None:
            out["operatorOverride"] = self.operator_override
        return out


@dataclass(frozen=True)
class IDTAction:
    id: str
    label: str
    level: Optional[ActionLevel] = None
    auto: bool = False
    recommend_manual: bool = False
    payload: Mapping[str, Any] = field(default_factory=dict)

    @property
    def effective_level(self) -> ActionLevel:
        return self.level if self.level is not None else ActionLevel.INFO

    def as_dict(self) -> JSONDict:
        out: JSONDict = {
            "id": self.id,
            "label": self.label,
            "level": self.effective_level.value,
            "auto": self.auto,
            "recommendManual": self.recommend_manual,
        }
        if self.payload:
            out["payload"] = dict(self.payload)
        return out


@dataclass(frozen=True)
class Condition:
    """Serializable predicate: a named rule kind plus typed parameters."""

    kind: ConditionKind
    threshold: Optional[float] = None
    outcome: Optional[Outcome] = None
    children: tuple["Condition", ...] = ()

    def as_dict(self) -> JSONDict:
        out: JSONDict = {"kind": self.kind.value}
        if self.threshold is not None:
            out["threshold"] = self.threshold
        if self.outcome is not None:
            out["outcome"] = self.outcome.value
        if self.children:
            out["children"] = [child.as_dict() for child in self.children]
        return out


@dataclass(frozen=True)
class IDTNode:
    id: str
    condition: Optional[Condition] = None
    actions: tuple[IDTAction, ...] = ()
    children: tuple["IDTNode", ...] = ()
    fallback: tuple[IDTAction, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class AdaptiveConfig:
    policy: AdaptivePolicy
    deploy_delay_in_seconds: float
    reason: str
    confidence: float
    suggested_actions: tuple[str, ...]
    cooldown_seconds: float
    max_concurrent_deploys: int
    generated_at: str

    def as_dict(self) -> JSONDict:
        return {
            "policy": self.policy.value,
            "deployDelayInSeconds": self.deploy_delay_in_seconds,
            "reason": self.reason,
            "confidence": self.confidence,
            "suggestedActions": list(self.suggested_actions),
            "cooldownSeconds": self.cooldown_seconds,
            "maxConcurrentDeploys": self.max_concurrent_deploys,
            "generatedAt": self.generated_at,
        }
