"""Evaluation result payload for a single decision-tree walk.

Responsibilities:
  - Capture the trace, deduplicated actions and the context snapshot for audit.

Inputs/Outputs:
  - Inputs: produced by evaluator.evaluate_decision_tree.
  - Outputs: immutable dataclass consumed by the tuner and the audit sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..domain.models import DecisionContext, IDTAction


@dataclass(frozen=True)
class TraceEntry:
    node_id: str
    matched: bool
    reason: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"nodeId": self.node_id, "matched": self.matched}
        if self.reason is not None:
            out["reason"] = self.reason
        return out


@dataclass(frozen=True)
class DecisionResult:
    trace: tuple[TraceEntry, ...]
    actions: tuple[IDTAction, ...]
    decision_timestamp: str
    context_snapshot: DecisionContext
    matched: bool

    def action_ids(self) -> list[str]:
        return [action.id for action in self.actions]

    def as_audit_payload(self) -> dict[str, Any]:
        return {
            "trace": [entry.as_dict() for entry in self.trace],
            "actions": [action.as_dict() for action in self.actions],
            "decisionTimestamp": self.decision_timestamp,
            "contextSnapshot": self.context_snapshot.as_dict(),
        }
