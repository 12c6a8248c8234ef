"""Tests for the action-list to AdaptiveConfig translator."""

from __future__ import annotations

import pytest

from deploytuner.core.domain.enums import ActionLevel, AdaptivePolicy
from deploytuner.core.domain.models import IDTAction
from deploytuner.core.policy.default_policy import (
    ACTION_ALERT_ONCALL,
    ACTION_MANUAL_AUDIT,
    ACTION_NO_OP,
    ACTION_ROLLBACK,
    ACTION_SCALE_UP,
    _delay_deploy_action,
)
from deploytuner.core.tuner.translator import (
    NOMINAL_REASON,
    select_priority_action,
    translate_actions_to_config,
)

NOW = "2026-01-01T00:00:00+00:00"


def test_empty_actions_mean_nominal_immediate() -> None:
    config = translate_actions_to_config([], now=NOW)

    assert config.policy == AdaptivePolicy.IMMEDIATE
    assert config.deploy_delay_in_seconds == 0
    assert config.reason == NOMINAL_REASON
    assert config.suggested_actions == ("Monitor deployment",)
    assert config.cooldown_seconds == 60
    assert config.confidence == 1.0
    assert config.generated_at == NOW


def test_high_cpu_actions_translate_to_delayed() -> None:
    actions = [_delay_deploy_action(300), ACTION_SCALE_UP]

    config = translate_actions_to_config(actions, now=NOW)

    assert config.policy == AdaptivePolicy.DELAYED
    assert config.deploy_delay_in_seconds == 300
    assert config.reason == (
        "Delay next deployment | Recommend scaling up instance group / increase replicas"
    )
    assert config.suggested_actions == (ACTION_SCALE_UP.label,)
    assert config.cooldown_seconds == 300
    assert config.max_concurrent_deploys == 1


def test_critical_actions_require_manual_approval() -> None:
    config = translate_actions_to_config([ACTION_ROLLBACK, ACTION_ALERT_ONCALL], now=NOW)

    assert config.policy == AdaptivePolicy.MANUAL_APPROVAL
    assert config.deploy_delay_in_seconds == 0
    assert config.suggested_actions == (ACTION_ROLLBACK.label, ACTION_ALERT_ONCALL.label)


def test_warn_with_manual_recommendation_requires_approval() -> None:
    config = translate_actions_to_config([ACTION_MANUAL_AUDIT], now=NOW)

    assert config.policy == AdaptivePolicy.MANUAL_APPROVAL


def test_no_manual_labels_suggest_the_reason() -> None:
    config = translate_actions_to_config([ACTION_NO_OP], now=NOW)

    assert config.policy == AdaptivePolicy.IMMEDIATE
    assert config.reason == "System nominal. Monitor."
    assert config.suggested_actions == ("System nominal. Monitor.",)


def test_priority_is_first_maximum_weight() -> None:
    first = IDTAction(id="a", label="a", level=ActionLevel.WARN)
    second = IDTAction(id="b", label="b", level=ActionLevel.WARN, recommend_manual=True)
    low = IDTAction(id="c", label="c")

    assert select_priority_action([low, first, second]) is first
    assert translate_actions_to_config([low, first, second]).policy == AdaptivePolicy.DELAYED


def test_missing_level_counts_as_info() -> None:
    unlevelled = IDTAction(id="x", label="x", auto=True)

    config = translate_actions_to_config([unlevelled], now=NOW)

    assert config.policy == AdaptivePolicy.IMMEDIATE


def test_delay_defaults_without_payload() -> None:
    warn = IDTAction(id="w", label="w", level=ActionLevel.WARN)

    config = translate_actions_to_config([warn], now=NOW)

    assert config.deploy_delay_in_seconds == 300


def test_input_order_is_preserved() -> None:
    actions = [ACTION_NO_OP, ACTION_ROLLBACK]
    snapshot = list(actions)

    config = translate_actions_to_config(actions, now=NOW)

    assert actions == snapshot
    assert config.reason == f"{ACTION_NO_OP.label} | {ACTION_ROLLBACK.label}"


def test_select_priority_requires_actions() -> None:
    with pytest.raises(ValueError):
        select_priority_action([])


def test_config_wire_shape() -> None:
    config = translate_actions_to_config([_delay_deploy_action(120)], now=NOW)

    assert config.as_dict() == {
        "policy": "DELAYED",
        "deployDelayInSeconds": 120,
        "reason": "Delay next deployment",
        "confidence": 1.0,
        "suggestedActions": ["Delay next deployment"],
        "cooldownSeconds": 300,
        "maxConcurrentDeploys": 1,
        "generatedAt": NOW,
    }


@pytest.mark.parametrize("delay", ["soon", -10, True, float("inf"), None])
def test_unusable_payload_delay_falls_back_to_default(delay) -> None:
    warn = IDTAction(id="w", label="w", level=ActionLevel.WARN, payload={"delaySeconds": delay})

    config = translate_actions_to_config([warn], now=NOW)

    assert config.policy == AdaptivePolicy.DELAYED
    assert config.deploy_delay_in_seconds == 300


def test_zero_payload_delay_is_kept() -> None:
    warn = IDTAction(id="w", label="w", level=ActionLevel.WARN, payload={"delaySeconds": 0})

    assert translate_actions_to_config([warn], now=NOW).deploy_delay_in_seconds == 0
