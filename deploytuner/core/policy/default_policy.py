"""Default operational policy tree.

Responsibilities:
  - Encode the critical-failure, high-CPU and low-accuracy rules under an always-true root.
  - Provide the root fallback used when no rule matches.

Invariants:
  - Child order is precedence: critical failure > high CPU > low accuracy.
  - Thresholds come from PolicyThresholds; defaults must not drift.
"""

from __future__ import annotations

from typing import Optional

from deploytuner.core.domain.enums import ActionLevel, Outcome
from deploytuner.core.domain.models import IDTAction, IDTNode
from .conditions import (
    ALWAYS,
    all_of,
    cpu_above,
    health_checks_failed_at_least,
    outcome_is,
    recent_accuracy_below,
)
from .thresholds import DEFAULT_THRESHOLDS, PolicyThresholds

ROOT_ID = "root"
CRITICAL_FAILURE_ID = "critical-failure"
HIGH_CPU_ID = "high-cpu"
LOW_ACCURACY_ID = "low-accuracy-trend"

ACTION_ROLLBACK = IDTAction(
    id="rollback",
    label="Rollback to previous release",
    level=ActionLevel.CRITICAL,
    auto=False,
    recommend_manual=True,
    payload={"method": "atomic-symlink-rollback"},
)
ACTION_ALERT_ONCALL = IDTAction(
    id="alert-oncall",
    label="Alert on-call team",
    level=ActionLevel.CRITICAL,
    auto=False,
    recommend_manual=True,
    payload={"channel": "pagerduty"},
)
ACTION_SCALE_UP = IDTAction(
    id="scale-up",
    label="Recommend scaling up instance group / increase replicas",
    level=ActionLevel.WARN,
    auto=False,
    recommend_manual=True,
    payload={"scaleBy": 1},
)
ACTION_MANUAL_AUDIT = IDTAction(
    id="manual-audit",
    label="Request operator audit due to low historical accuracy",
    level=ActionLevel.WARN,
    auto=False,
    recommend_manual=True,
)
ACTION_NO_OP = IDTAction(
    id="no-op",
    label="System nominal. Monitor.",
    level=ActionLevel.INFO,
    auto=True,
)


def _delay_deploy_action(delay_seconds: float) -> IDTAction:
    delay: float | int = int(delay_seconds) if float(delay_seconds).is_integer() else delay_seconds
    return IDTAction(
        id="delay-deploy",
        label="Delay next deployment",
        level=ActionLevel.WARN,
        auto=True,
        recommend_manual=False,
        payload={"delaySeconds": delay},
    )


def build_default_policy(thresholds: Optional[PolicyThresholds] = None) -> IDTNode:
    t = thresholds or DEFAULT_THRESHOLDS

    critical_failure = IDTNode(
        id=CRITICAL_FAILURE_ID,
        description="Deploy failed and health checks are failing: roll back now",
        condition=all_of(
            outcome_is(Outcome.FAIL),
            health_checks_failed_at_least(t.health_checks_failed_min),
        ),
        actions=(ACTION_ROLLBACK, ACTION_ALERT_ONCALL),
    )
    high_cpu = IDTNode(
        id=HIGH_CPU_ID,
        description=f"CPU above {t.cpu_high_pct:g}% during a new deployment",
        condition=cpu_above(t.cpu_high_pct),
        actions=(_delay_deploy_action(t.delay_deploy_seconds), ACTION_SCALE_UP),
    )
    low_accuracy = IDTNode(
        id=LOW_ACCURACY_ID,
        description="Decision accuracy over the last 7 days is low",
        condition=recent_accuracy_below(t.recent_accuracy_min),
        actions=(ACTION_MANUAL_AUDIT,),
    )

    return IDTNode(
        id=ROOT_ID,
        description="Root deploy policy",
        condition=ALWAYS,
        children=(critical_failure, high_cpu, low_accuracy),
        fallback=(ACTION_NO_OP,),
    )


DEFAULT_POLICY = build_default_policy()
