from __future__ import annotations

from deploytuner.core.domain.enums import ActionLevel, RiskLevel
from deploytuner.core.domain.models import IDTAction
from deploytuner.core.policy.action_catalog import (
    ActionCatalog,
    RegisteredAction,
    default_action_catalog,
    plan_execution,
)
from deploytuner.core.policy.default_policy import (
    ACTION_ALERT_ONCALL,
    ACTION_NO_OP,
    ACTION_ROLLBACK,
    ACTION_SCALE_UP,
    _delay_deploy_action,
)


def test_default_catalog_covers_policy_actions() -> None:
    catalog = default_action_catalog()

    assert catalog.ids() == [
        "alert-oncall",
        "delay-deploy",
        "manual-audit",
        "no-op",
        "rollback",
        "scale-up",
    ]
    assert catalog.get("rollback").risk_level == RiskLevel.HIGH


def test_plan_splits_actions() -> None:
    rogue = IDTAction(id="reboot", label="Reboot host", level=ActionLevel.CRITICAL, auto=True)
    actions = [ACTION_ROLLBACK, ACTION_ALERT_ONCALL, _delay_deploy_action(300), ACTION_SCALE_UP, ACTION_NO_OP, rogue]

    plan = plan_execution(actions, default_action_catalog())

    assert [a.id for a in plan.auto_eligible] == ["delay-deploy", "no-op"]
    assert [(p.action.id, p.reason) for p in plan.pending_approval] == [
        ("rollback", "High risk level"),
        ("alert-oncall", "Manual recommendation"),
        ("scale-up", "Manual recommendation"),
    ]
    assert [a.id for a in plan.skipped] == ["reboot"]


def test_high_risk_auto_action_still_needs_approval() -> None:
    catalog = ActionCatalog()
    catalog.register(RegisteredAction("purge", "Purge caches", RiskLevel.HIGH, lambda payload: "purged"))
    purge = IDTAction(id="purge", label="Purge", auto=True)

    plan = plan_execution([purge], catalog)

    assert plan.auto_eligible == []
    assert plan.pending_approval[0].reason == "High risk level"


def test_handlers_describe_without_executing() -> None:
    catalog = default_action_catalog()

    assert catalog.get("delay-deploy").handler({"delaySeconds": 300}) == "Next deployment delayed by 300s."
    assert catalog.get("alert-oncall").handler(ACTION_ALERT_ONCALL.payload) == "Notification sent to pagerduty."
