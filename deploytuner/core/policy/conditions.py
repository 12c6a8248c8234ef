"""Tagged condition variants and their interpreter.

Responsibilities:
  - Build serializable Condition values (kind + parameters) for policy nodes.
  - Interpret a Condition against a DecisionContext.

Invariants:
  - CPU and error-rate kinds never match when the metrics bag is absent; missing fields default to 0.
  - healthChecksFailedAtLeast reads an absent bag as 0 failed checks.
  - recentAccuracyBelow never matches without a trend; a missing accuracy defaults to 1.
  - Unknown kinds raise ConditionError; callers decide how to degrade.
"""

from __future__ import annotations

from typing import Optional

from deploytuner.core.domain.enums import ConditionKind, Outcome
from deploytuner.core.domain.models import Condition, DecisionContext


class ConditionError(ValueError):
    pass


ALWAYS = Condition(kind=ConditionKind.ALWAYS)


def cpu_above(pct: float) -> Condition:
    return Condition(kind=ConditionKind.CPU_ABOVE, threshold=float(pct))


def cpu_below(pct: float) -> Condition:
    return Condition(kind=ConditionKind.CPU_BELOW, threshold=float(pct))


def error_rate_above(threshold: float) -> Condition:
    return Condition(kind=ConditionKind.ERROR_RATE_ABOVE, threshold=float(threshold))


def recent_accuracy_below(threshold: float) -> Condition:
    return Condition(kind=ConditionKind.RECENT_ACCURACY_BELOW, threshold=float(threshold))


def health_checks_failed_at_least(n: int) -> Condition:
    return Condition(kind=ConditionKind.HEALTH_CHECKS_FAILED_AT_LEAST, threshold=float(n))


def outcome_is(outcome: Outcome) -> Condition:
    return Condition(kind=ConditionKind.OUTCOME_IS, outcome=outcome)


def all_of(*conditions: Condition) -> Condition:
    return Condition(kind=ConditionKind.ALL_OF, children=tuple(conditions))


def _require_threshold(condition: Condition) -> float:
    if condition.threshold is None:
        raise ConditionError(f"{condition.kind.value} requires a threshold")
    return condition.threshold


def _metric(ctx: DecisionContext, name: str) -> Optional[float]:
    if ctx.metrics is None:
        return None
    value = getattr(ctx.metrics, name)
    return 0.0 if value is None else value


def evaluate_condition(condition: Optional[Condition], ctx: DecisionContext) -> bool:
    if condition is None:
        return True

    kind = condition.kind
    if kind == ConditionKind.ALWAYS:
        return True

    if kind == ConditionKind.CPU_ABOVE:
        cpu = _metric(ctx, "cpu")
        return cpu is not None and cpu > _require_threshold(condition)

    if kind == ConditionKind.CPU_BELOW:
        cpu = _metric(ctx, "cpu")
        return cpu is not None and cpu < _require_threshold(condition)

    if kind == ConditionKind.ERROR_RATE_ABOVE:
        rate = _metric(ctx, "error_rate")
        return rate is not None and rate > _require_threshold(condition)

    if kind == ConditionKind.HEALTH_CHECKS_FAILED_AT_LEAST:
        failed = ctx.metrics.health_checks_failed if ctx.metrics is not None else None
        return (failed or 0) >= _require_threshold(condition)

    if kind == ConditionKind.RECENT_ACCURACY_BELOW:
        if ctx.recent_trend is None:
            return False
        accuracy = ctx.recent_trend.accuracy_7d
        if accuracy is None:
            accuracy = 1.0
        return accuracy < _require_threshold(condition)

    if kind == ConditionKind.OUTCOME_IS:
        if condition.outcome is None:
            raise ConditionError("outcomeIs requires an outcome")
        return ctx.outcome == condition.outcome

    if kind == ConditionKind.ALL_OF:
        if not condition.children:
            raise ConditionError("allOf requires at least one child condition")
        return all(evaluate_condition(child, ctx) for child in condition.children)

    raise ConditionError(f"Unknown condition kind: {kind}")
