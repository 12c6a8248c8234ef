from __future__ import annotations

import json
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class PolicyThresholds:
    cpu_high_pct: float = 85.0
    recent_accuracy_min: float = 0.8
    health_checks_failed_min: int = 1
    delay_deploy_seconds: float = 300.0


DEFAULT_THRESHOLDS = PolicyThresholds()

_FIELD_KEYS = {
    "cpuHighPct": "cpu_high_pct",
    "recentAccuracyMin": "recent_accuracy_min",
    "healthChecksFailedMin": "health_checks_failed_min",
    "delayDeploySeconds": "delay_deploy_seconds",
}


def _require_float(payload: dict[str, Any], key: str) -> float:
    value = payload[key]
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be float")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Field '{key}' must be finite")
    return float(value)


def _require_int(payload: dict[str, Any], key: str) -> int:
    value = payload[key]
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Field '{key}' must be int")
    return value


def thresholds_from_dict(payload: dict[str, Any]) -> PolicyThresholds:
    if not isinstance(payload, dict):
        raise ValueError("Policy thresholds must be a JSON object")
    unknown = sorted(set(payload) - set(_FIELD_KEYS))
    if unknown:
        raise ValueError(f"Unknown policy threshold fields: {unknown}")

    updates: dict[str, Any] = {}
    if "cpuHighPct" in payload:
        cpu = _require_float(payload, "cpuHighPct")
        if cpu < 0.0 or cpu > 100.0:
            raise ValueError("Field 'cpuHighPct' must be within [0, 100]")
        updates["cpu_high_pct"] = cpu
    if "recentAccuracyMin" in payload:
        accuracy = _require_float(payload, "recentAccuracyMin")
        if accuracy < 0.0 or accuracy > 1.0:
            raise ValueError("Field 'recentAccuracyMin' must be within [0, 1]")
        updates["recent_accuracy_min"] = accuracy
    if "healthChecksFailedMin" in payload:
        failed = _require_int(payload, "healthChecksFailedMin")
        if failed < 0:
            raise ValueError("Field 'healthChecksFailedMin' must be >= 0")
        updates["health_checks_failed_min"] = failed
    if "delayDeploySeconds" in payload:
        delay = _require_float(payload, "delayDeploySeconds")
        if delay < 0.0:
            raise ValueError("Field 'delayDeploySeconds' must be >= 0")
        updates["delay_deploy_seconds"] = delay

    return replace(DEFAULT_THRESHOLDS, **updates)


def load_policy_thresholds(path: str | Path) -> PolicyThresholds:
    thresholds_path = Path(path)
    if not thresholds_path.exists():
        raise ValueError(f"Policy thresholds file not found: {thresholds_path}")
    payload = json.loads(thresholds_path.read_text(encoding="utf-8"))
    return thresholds_from_dict(payload)
