"""DTO definitions for data arriving from external collaborators.

Responsibilities:
  - Define stable, typed structures for health insights, host info, logs and feedback summaries.
  - Read the camelCase JSON those collaborators emit.
Must not:
  - Implement business logic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

SystemHealthLevel = Literal["Nominal", "Warning", "Critical", "Unknown"]
_HEALTH_LEVELS = ("Nominal", "Warning", "Critical", "Unknown")


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return default
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) or math.isinf(value) else float(value)
    return None


@dataclass(frozen=True)
class HealthMetrics:
    success_rate: float
    avg_deploy_time: float


@dataclass(frozen=True)
class SystemHealthInsight:
    level: SystemHealthLevel
    message: str
    metrics: HealthMetrics

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SystemHealthInsight":
        if not isinstance(payload, Mapping):
            raise ValueError("health insight must be an object")
        level = payload.get("level")
        if level not in _HEALTH_LEVELS:
            level = "Unknown"
        metrics = payload.get("metrics") or {}
        if not isinstance(metrics, Mapping):
            raise ValueError("health insight metrics must be an object")
        if "successRate" not in metrics:
            raise ValueError("health insight metrics.successRate is required")
        return cls(
            level=level,
            message=str(payload.get("message") or ""),
            metrics=HealthMetrics(
                success_rate=_number(metrics.get("successRate")),
                avg_deploy_time=_number(metrics.get("avgDeployTime")),
            ),
        )


@dataclass(frozen=True)
class VpsSystemInfo:
    platform: str = ""
    memory: str = ""
    uptime: str = ""
    load_avg: tuple[float, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "VpsSystemInfo":
        if not isinstance(payload, Mapping):
            raise ValueError("system info must be an object")
        raw_load = payload.get("loadAvg") or []
        if not isinstance(raw_load, (list, tuple)):
            raise ValueError("system info loadAvg must be a list")
        return cls(
            platform=str(payload.get("platform") or ""),
            memory=str(payload.get("memory") or ""),
            uptime=str(payload.get("uptime") or ""),
            load_avg=tuple(_number(v) for v in raw_load),
        )


@dataclass(frozen=True)
class VpsLogEntry:
    id: str
    text: str
    level: Optional[str] = None
    timestamp: Optional[float] = None
    meta: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "VpsLogEntry":
        if not isinstance(payload, Mapping):
            raise ValueError("log entry must be an object")
        level = payload.get("level")
        meta = payload.get("meta")
        return cls(
            id=str(payload.get("id") or ""),
            text=str(payload.get("text") or ""),
            level=level if isinstance(level, str) else None,
            timestamp=_optional_number(payload.get("timestamp")),
            meta=meta if isinstance(meta, Mapping) else None,
        )


@dataclass(frozen=True)
class TrendPoint:
    label: str
    accuracy: Optional[float]


@dataclass(frozen=True)
class FeedbackSummary:
    accuracy_rate: float
    total: int
    success_count: int
    average_confidence: Optional[float] = None
    trend: tuple[TrendPoint, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "FeedbackSummary":
        if not isinstance(payload, Mapping):
            raise ValueError("feedback summary must be an object")
        trend: list[TrendPoint] = []
        for point in payload.get("trend") or []:
            if not isinstance(point, Mapping):
                continue
            trend.append(
                TrendPoint(
                    label=str(point.get("label") or ""),
                    accuracy=_optional_number(point.get("accuracy")),
                )
            )
        return cls(
            accuracy_rate=_number(payload.get("accuracyRate")),
            total=int(_number(payload.get("total"))),
            success_count=int(_number(payload.get("successCount"))),
            average_confidence=_optional_number(payload.get("averageConfidence")),
            trend=tuple(trend),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "accuracyRate": self.accuracy_rate,
            "total": self.total,
            "successCount": self.success_count,
            "averageConfidence": self.average_confidence,
            "trend": [{"label": p.label, "accuracy": p.accuracy} for p in self.trend],
        }
