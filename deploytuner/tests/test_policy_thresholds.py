from __future__ import annotations

import json

import pytest

from deploytuner.core.policy.default_policy import build_default_policy
from deploytuner.core.policy.thresholds import (
    DEFAULT_THRESHOLDS,
    load_policy_thresholds,
    thresholds_from_dict,
)


def test_defaults() -> None:
    assert DEFAULT_THRESHOLDS.cpu_high_pct == 85.0
    assert DEFAULT_THRESHOLDS.recent_accuracy_min == 0.8
    assert DEFAULT_THRESHOLDS.health_checks_failed_min == 1
    assert DEFAULT_THRESHOLDS.delay_deploy_seconds == 300.0


def test_partial_file_keeps_defaults(tmp_path) -> None:
    path = tmp_path / "thresholds.json"
    path.write_text(json.dumps({"cpuHighPct": 70, "delayDeploySeconds": 120}), encoding="utf-8")

    t = load_policy_thresholds(path)

    assert t.cpu_high_pct == 70.0
    assert t.delay_deploy_seconds == 120.0
    assert t.recent_accuracy_min == 0.8


@pytest.mark.parametrize(
    "payload",
    [
        {"cpuHighPct": "high"},
        {"cpuHighPct": 150},
        {"recentAccuracyMin": 1.5},
        {"healthChecksFailedMin": 1.5},
        {"healthChecksFailedMin": True},
        {"delayDeploySeconds": -1},
        {"unknownField": 1},
    ],
)
def test_invalid_values_raise(payload) -> None:
    with pytest.raises(ValueError):
        thresholds_from_dict(payload)


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(ValueError, match="not found"):
        load_policy_thresholds(tmp_path / "missing.json")


def test_thresholds_flow_into_policy_tree() -> None:
    policy = build_default_policy(thresholds_from_dict({"cpuHighPct": 50, "delayDeploySeconds": 45}))

    high_cpu = policy.children[1]
    assert high_cpu.id == "high-cpu"
    assert high_cpu.condition.threshold == 50.0
    assert high_cpu.actions[0].payload == {"delaySeconds": 45}


def test_default_policy_shape() -> None:
    policy = build_default_policy()

    assert policy.id == "root"
    assert [child.id for child in policy.children] == [
        "critical-failure",
        "high-cpu",
        "low-accuracy-trend",
    ]
    assert [a.id for a in policy.fallback] == ["no-op"]
    assert policy.fallback[0].label == "System nominal. Monitor."
