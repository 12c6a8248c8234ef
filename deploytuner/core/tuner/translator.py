"""Collapse a decision's action list into a single AdaptiveConfig.

Responsibilities:
  - Pick the priority action by severity (stable: first maximum wins).
  - Map the priority action to a deploy policy and delay.
  - Surface every fired label in the reason and every manual label as a suggestion.

Invariants:
  - The rule-based path always reports confidence 1.0.
  - The input sequence is never reordered or mutated.
"""

from __future__ import annotations

import datetime
import math
from typing import Optional, Sequence

from ..domain.enums import ActionLevel, AdaptivePolicy, level_weight
from ..domain.models import AdaptiveConfig, IDTAction

REASON_SEPARATOR = " | "
DEFAULT_DELAY_SECONDS = 300
RULE_CONFIDENCE = 1.0
RULE_COOLDOWN_SECONDS = 300
RULE_MAX_CONCURRENT_DEPLOYS = 1

NOMINAL_REASON = "System nominal. Auto-deployments will proceed immediately."
NOMINAL_SUGGESTION = "Monitor deployment"
NOMINAL_COOLDOWN_SECONDS = 60


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def select_priority_action(actions: Sequence[IDTAction]) -> IDTAction:
    if not actions:
        raise ValueError("select_priority_action requires at least one action")
    best = actions[0]
    best_weight = level_weight(best.level)
    for action in actions[1:]:
        weight = level_weight(action.level)
        if weight > best_weight:
            best = action
            best_weight = weight
    return best


def policy_for_action(action: IDTAction) -> AdaptivePolicy:
    if action.level == ActionLevel.CRITICAL or action.recommend_manual:
        return AdaptivePolicy.MANUAL_APPROVAL
    if action.level == ActionLevel.WARN:
        return AdaptivePolicy.DELAYED
    return AdaptivePolicy.IMMEDIATE


def _payload_delay(action: IDTAction) -> float:
    value = action.payload.get("delaySeconds") if action.payload else None
    # Unusable delays fall back to the default.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_DELAY_SECONDS
    if math.isnan(value) or math.isinf(value) or value < 0:
        return DEFAULT_DELAY_SECONDS
    return value


def translate_actions_to_config(
    actions: Sequence[IDTAction], now: Optional[str] = None
) -> AdaptiveConfig:
    generated_at = now or _utc_now_iso()

    if not actions:
        return AdaptiveConfig(
            policy=AdaptivePolicy.IMMEDIATE,
            deploy_delay_in_seconds=0,
            reason=NOMINAL_REASON,
            confidence=RULE_CONFIDENCE,
            suggested_actions=(NOMINAL_SUGGESTION,),
            cooldown_seconds=NOMINAL_COOLDOWN_SECONDS,
            max_concurrent_deploys=RULE_MAX_CONCURRENT_DEPLOYS,
            generated_at=generated_at,
        )

    priority = select_priority_action(actions)
    policy = policy_for_action(priority)

    reason = REASON_SEPARATOR.join(action.label for action in actions)
    suggested = [action.label for action in actions if action.recommend_manual]

    return AdaptiveConfig(
        policy=policy,
        deploy_delay_in_seconds=_payload_delay(priority) if policy == AdaptivePolicy.DELAYED else 0,
        reason=reason,
        confidence=RULE_CONFIDENCE,
        suggested_actions=tuple(suggested) if suggested else (reason,),
        cooldown_seconds=RULE_COOLDOWN_SECONDS,
        max_concurrent_deploys=RULE_MAX_CONCURRENT_DEPLOYS,
        generated_at=generated_at,
    )
