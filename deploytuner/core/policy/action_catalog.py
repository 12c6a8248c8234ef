"""Action catalog and conceptual execution planning.

Responsibilities:
  - Map action ids to a risk level and a stub handler.
  - Split a decision's actions into auto-eligible, pending-approval and skipped.
Must not:
  - Execute anything; handlers only describe what would run.
  - Be consulted by the evaluator; action ids are resolved here, after evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional

from deploytuner.core.domain.enums import RiskLevel
from deploytuner.core.domain.models import IDTAction

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Mapping[str, Any]], str]


@dataclass(frozen=True)
class RegisteredAction:
    id: str
    description: str
    risk_level: RiskLevel
    handler: ActionHandler


@dataclass(frozen=True)
class PendingAction:
    action: IDTAction
    reason: str


@dataclass
class ExecutionPlan:
    auto_eligible: list[IDTAction] = field(default_factory=list)
    pending_approval: list[PendingAction] = field(default_factory=list)
    skipped: list[IDTAction] = field(default_factory=list)


class ActionCatalog:
    def __init__(self) -> None:
        self._actions: dict[str, RegisteredAction] = {}

    def register(self, action: RegisteredAction) -> None:
        if action.id in self._actions:
            logger.warning("Overwriting registered action: %s", action.id)
        self._actions[action.id] = action

    def get(self, action_id: str) -> Optional[RegisteredAction]:
        return self._actions.get(action_id)

    def ids(self) -> list[str]:
        return sorted(self._actions)


def _describe(template: str) -> ActionHandler:
    def handler(payload: Mapping[str, Any]) -> str:
        return template.format(**{k: payload.get(k) for k in ("release", "channel", "delaySeconds", "scaleBy")})

    return handler


def default_action_catalog() -> ActionCatalog:
    catalog = ActionCatalog()
    catalog.register(
        RegisteredAction(
            id="rollback",
            description="Roll back to the last successful release.",
            risk_level=RiskLevel.HIGH,
            handler=_describe("Rollback to release {release} initiated."),
        )
    )
    catalog.register(
        RegisteredAction(
            id="alert-oncall",
            description="Notify the on-call team.",
            risk_level=RiskLevel.LOW,
            handler=_describe("Notification sent to {channel}."),
        )
    )
    catalog.register(
        RegisteredAction(
            id="delay-deploy",
            description="Postpone the next automatic deployment.",
            risk_level=RiskLevel.MEDIUM,
            handler=_describe("Next deployment delayed by {delaySeconds}s."),
        )
    )
    catalog.register(
        RegisteredAction(
            id="scale-up",
            description="Increase replicas for the instance group.",
            risk_level=RiskLevel.MEDIUM,
            handler=_describe("Scale-up by {scaleBy} requested."),
        )
    )
    catalog.register(
        RegisteredAction(
            id="manual-audit",
            description="Ask an operator to audit recent decisions.",
            risk_level=RiskLevel.LOW,
            handler=_describe("Operator audit requested."),
        )
    )
    catalog.register(
        RegisteredAction(
            id="no-op",
            description="Keep monitoring; nothing to do.",
            risk_level=RiskLevel.LOW,
            handler=_describe("No action taken."),
        )
    )
    return catalog


def plan_execution(actions: Iterable[IDTAction], catalog: ActionCatalog) -> ExecutionPlan:
    plan = ExecutionPlan()
    for action in actions:
        registered = catalog.get(action.id)
        if registered is None:
            logger.warning("Action %s is not registered; skipped", action.id)
            plan.skipped.append(action)
            continue
        if action.auto and registered.risk_level != RiskLevel.HIGH:
            plan.auto_eligible.append(action)
            continue
        reason = "High risk level" if registered.risk_level == RiskLevel.HIGH else "Manual recommendation"
        plan.pending_approval.append(PendingAction(action=action, reason=reason))
    return plan
