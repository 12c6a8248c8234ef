"""Domain enums for decision evaluation and deploy policy.

Responsibilities:
  - Define Outcome, ActionLevel, AdaptivePolicy and condition identifiers.
  - Provide the severity weights used for priority-action selection.

Invariants:
  - Enum values must remain stable for persistence and audits.
  - Every ActionLevel must carry a severity weight.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Outcome(Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"
    PARTIAL = "PARTIAL"
    UNKNOWN = "UNKNOWN"


class ActionLevel(Enum):
    INFO = "INFO"
    WARN = "WARN"
    CRITICAL = "CRITICAL"


class AdaptivePolicy(Enum):
    IMMEDIATE = "IMMEDIATE"
    DELAYED = "DELAYED"
    MANUAL_APPROVAL = "MANUAL_APPROVAL"


# Tagged condition identifiers; value is the serialized kind.
class ConditionKind(Enum):
    ALWAYS = "always"
    CPU_ABOVE = "cpuAbove"
    CPU_BELOW = "cpuBelow"
    ERROR_RATE_ABOVE = "errorRateAbove"
    RECENT_ACCURACY_BELOW = "recentAccuracyBelow"
    HEALTH_CHECKS_FAILED_AT_LEAST = "healthChecksFailedAtLeast"
    OUTCOME_IS = "outcomeIs"
    ALL_OF = "allOf"


class RiskLevel(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ExecutionStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    APPLIED = "applied"
    FAILED = "failed"


LEVEL_WEIGHTS: dict[ActionLevel, int] = {
    ActionLevel.CRITICAL: 3,
    ActionLevel.WARN: 2,
    ActionLevel.INFO: 1,
}

DEFAULT_LEVEL_WEIGHT = 1


def level_weight(level: Optional[ActionLevel]) -> int:
    if level is None:
        return DEFAULT_LEVEL_WEIGHT
    return LEVEL_WEIGHTS.get(level, DEFAULT_LEVEL_WEIGHT)


def parse_level(value: object) -> ActionLevel | None:
    if isinstance(value, ActionLevel):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return ActionLevel(value.upper())
    except Exception:
        return None


def parse_outcome(value: object) -> Outcome:
    if isinstance(value, Outcome):
        return value
    if isinstance(value, str):
        try:
            return Outcome(value.upper())
        except Exception:
            return Outcome.UNKNOWN
    return Outcome.UNKNOWN


_missing = [lvl for lvl in ActionLevel if lvl not in LEVEL_WEIGHTS]
if _missing:
    raise RuntimeError(f"Missing LEVEL_WEIGHTS for: {[m.value for m in _missing]}")
