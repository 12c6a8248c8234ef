"""Tests for the decision-tree evaluator."""

from __future__ import annotations

from deploytuner.core.domain.enums import ActionLevel, AdaptivePolicy, ConditionKind, Outcome
from deploytuner.core.domain.models import (
    Condition,
    DecisionContext,
    IDTAction,
    IDTNode,
    Metrics,
    RecentTrend,
)
from deploytuner.core.engine.evaluator import evaluate_decision_tree
from deploytuner.core.engine.observers import CallbackObserver, RecordingObserver
from deploytuner.core.policy.conditions import ALWAYS, cpu_above
from deploytuner.core.policy.default_policy import DEFAULT_POLICY, build_default_policy
from deploytuner.core.policy.thresholds import thresholds_from_dict
from deploytuner.core.tuner.translator import translate_actions_to_config


def _ctx(
    outcome: Outcome = Outcome.SUCCESS,
    cpu: float = 10.0,
    failed: int = 0,
    accuracy: float = 0.95,
) -> DecisionContext:
    return DecisionContext(
        project="web",
        outcome=outcome,
        metrics=Metrics(cpu=cpu, health_checks_failed=failed),
        recent_trend=RecentTrend(accuracy_7d=accuracy),
    )


def _action(action_id: str, level: ActionLevel = ActionLevel.INFO) -> IDTAction:
    return IDTAction(id=action_id, label=action_id, level=level, auto=True)


def test_critical_failure_yields_rollback_and_alert() -> None:
    for cpu in (10.0, 95.0):
        for failed in (1, 3):
            result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(Outcome.FAIL, cpu=cpu, failed=failed))

            assert result.action_ids() == ["rollback", "alert-oncall"]
            assert all(a.level == ActionLevel.CRITICAL for a in result.actions)
            config = translate_actions_to_config(list(result.actions))
            assert config.policy == AdaptivePolicy.MANUAL_APPROVAL


def test_high_cpu_without_critical_failure_delays_deploy() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(cpu=92.0))

    assert result.action_ids() == ["delay-deploy", "scale-up"]
    config = translate_actions_to_config(list(result.actions))
    assert config.policy == AdaptivePolicy.DELAYED
    assert config.deploy_delay_in_seconds == 300


def test_failed_outcome_without_health_failures_falls_to_high_cpu() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(Outcome.FAIL, cpu=90.0, failed=0))

    assert result.action_ids() == ["delay-deploy", "scale-up"]


def test_low_accuracy_requests_manual_audit() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(accuracy=0.5))

    assert result.action_ids() == ["manual-audit"]
    assert [(e.node_id, e.matched) for e in result.trace] == [
        ("root", True),
        ("critical-failure", False),
        ("high-cpu", False),
        ("low-accuracy-trend", True),
    ]


def test_nominal_context_uses_root_fallback() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx())

    assert result.action_ids() == ["no-op"]
    assert result.matched is True
    config = translate_actions_to_config(list(result.actions))
    assert config.policy == AdaptivePolicy.IMMEDIATE
    assert config.confidence == 1.0


def test_cpu_exactly_at_threshold_does_not_match() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(cpu=85.0))

    assert result.action_ids() == ["no-op"]


def test_context_without_metrics_or_trend_is_nominal() -> None:
    ctx = DecisionContext(project="web", outcome=Outcome.FAIL)

    result = evaluate_decision_tree(DEFAULT_POLICY, ctx)

    assert result.action_ids() == ["no-op"]


def test_trace_records_visited_unmatched_nodes_and_stops_siblings() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(cpu=92.0, accuracy=0.1))

    assert [(e.node_id, e.matched, e.reason) for e in result.trace] == [
        ("root", True, "condition true"),
        ("critical-failure", False, "condition false"),
        ("high-cpu", True, "condition true"),
    ]


def test_evaluation_is_idempotent_and_does_not_mutate_context() -> None:
    ctx = _ctx(cpu=92.0)
    before = ctx.as_dict()

    first = evaluate_decision_tree(DEFAULT_POLICY, ctx)
    second = evaluate_decision_tree(DEFAULT_POLICY, ctx)

    assert first.actions == second.actions
    assert first.trace == second.trace
    assert ctx.as_dict() == before
    assert first.context_snapshot is ctx


def test_duplicate_action_ids_are_collapsed_keeping_first() -> None:
    first = IDTAction(id="dup", label="first", level=ActionLevel.WARN)
    second = IDTAction(id="dup", label="second", level=ActionLevel.CRITICAL)
    node = IDTNode(id="leaf", condition=ALWAYS, actions=(first, _action("other"), second))

    result = evaluate_decision_tree(node, _ctx())

    assert result.action_ids() == ["dup", "other"]
    assert result.actions[0].label == "first"


def test_condition_error_is_recorded_as_not_matched() -> None:
    broken = IDTNode(
        id="broken",
        condition=Condition(kind=ConditionKind.CPU_ABOVE),
        actions=(_action("never"),),
    )
    root = IDTNode(
        id="root",
        condition=ALWAYS,
        children=(broken,),
        fallback=(_action("fallback"),),
    )

    result = evaluate_decision_tree(root, _ctx(cpu=99.0))

    assert result.action_ids() == ["fallback"]
    assert len(result.trace) == 2
    entry = result.trace[1]
    assert entry.node_id == "broken"
    assert entry.matched is False
    assert entry.reason.startswith("condition error:")


def test_node_without_condition_matches() -> None:
    node = IDTNode(id="bare", actions=(_action("a"),))

    result = evaluate_decision_tree(node, _ctx())

    assert result.trace[0].reason == "no condition"
    assert result.action_ids() == ["a"]


def test_unmatched_children_use_fallback_not_actions() -> None:
    root = IDTNode(
        id="root",
        condition=ALWAYS,
        actions=(_action("own"),),
        children=(IDTNode(id="hot", condition=cpu_above(90), actions=(_action("child"),)),),
        fallback=(_action("fallback"),),
    )

    result = evaluate_decision_tree(root, _ctx(cpu=10.0))

    assert result.action_ids() == ["fallback"]


def test_unmatched_children_without_fallback_use_own_actions() -> None:
    root = IDTNode(
        id="root",
        condition=ALWAYS,
        actions=(_action("own"),),
        children=(IDTNode(id="hot", condition=cpu_above(90), actions=(_action("child"),)),),
    )

    result = evaluate_decision_tree(root, _ctx(cpu=10.0))

    assert result.action_ids() == ["own"]


def test_matched_child_actions_replace_parent_actions() -> None:
    root = IDTNode(
        id="root",
        condition=ALWAYS,
        actions=(_action("own"),),
        children=(IDTNode(id="hot", condition=cpu_above(90), actions=(_action("child"),)),),
        fallback=(_action("fallback"),),
    )

    result = evaluate_decision_tree(root, _ctx(cpu=95.0))

    assert result.action_ids() == ["child"]


def test_unmatched_root_returns_no_actions() -> None:
    root = IDTNode(id="root", condition=cpu_above(90), actions=(_action("a"),))

    result = evaluate_decision_tree(root, _ctx(cpu=10.0))

    assert result.matched is False
    assert result.actions == ()
    assert len(result.trace) == 1


def test_observers_receive_nodes_and_decision() -> None:
    recorder = RecordingObserver()
    lines: list[str] = []

    result = evaluate_decision_tree(
        DEFAULT_POLICY,
        _ctx(cpu=92.0),
        observers=[recorder, CallbackObserver(lines.append)],
        clock=lambda: "2026-01-01T00:00:00+00:00",
    )

    assert recorder.entries == list(result.trace)
    assert recorder.decisions == [result]
    assert lines[0] == "IDT_NODE node=root matched=True reason=condition true"
    assert lines[-1] == (
        "IDT_DECISION project=web actions=delay-deploy,scale-up at=2026-01-01T00:00:00+00:00"
    )


def test_failing_observer_does_not_break_evaluation() -> None:
    class _Exploding:
        def on_node(self, entry) -> None:
            raise RuntimeError("boom")

        def on_decision(self, result) -> None:
            raise RuntimeError("boom")

    recorder = RecordingObserver()
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(), observers=[_Exploding(), recorder])

    assert result.action_ids() == ["no-op"]
    assert len(recorder.decisions) == 1


def test_audit_payload_shape() -> None:
    result = evaluate_decision_tree(DEFAULT_POLICY, _ctx(), clock=lambda: "ts")

    payload = result.as_audit_payload()

    assert payload["decisionTimestamp"] == "ts"
    assert payload["contextSnapshot"]["project"] == "web"
    assert payload["trace"][0] == {"nodeId": "root", "matched": True, "reason": "condition true"}
    assert payload["actions"][0]["id"] == "no-op"


def test_zero_health_check_minimum_matches_failed_deploy_without_metrics() -> None:
    policy = build_default_policy(thresholds_from_dict({"healthChecksFailedMin": 0}))
    ctx = DecisionContext(project="web", outcome=Outcome.FAIL)

    result = evaluate_decision_tree(policy, ctx)

    assert result.action_ids() == ["rollback", "alert-oncall"]
