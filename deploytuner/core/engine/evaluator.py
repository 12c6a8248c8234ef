"""Decision-tree evaluation for a single DecisionContext.

Responsibilities:
  - Walk the policy tree depth-first, pre-order, first match wins among siblings.
  - Record one trace entry per visited node, matched or not.
  - Collect the resolving node's actions (or fallback) and deduplicate them by id.

Inputs/Outputs:
  - Inputs: root IDTNode, DecisionContext, optional per-call observers.
  - Outputs: DecisionResult with trace, actions, timestamp and the untouched context.

Invariants:
  - Total: a failing condition degrades to "not matched" and never escapes.
  - Pure over its inputs; no process-wide state, safe to call concurrently.
  - A matched node whose children all fail uses its fallback, not its actions,
    when a fallback is present.
"""

from __future__ import annotations

import datetime
from typing import Callable, Iterable, Optional

from ..domain.models import DecisionContext, IDTAction, IDTNode
from ..policy.conditions import evaluate_condition
from .observers import EvaluationObserver, notify_decision, notify_node
from .result import DecisionResult, TraceEntry

REASON_TRUE = "condition true"
REASON_FALSE = "condition false"
REASON_NO_CONDITION = "no condition"


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def dedupe_actions(actions: Iterable[IDTAction]) -> list[IDTAction]:
    seen: set[str] = set()
    out: list[IDTAction] = []
    for action in actions:
        if action.id in seen:
            continue
        seen.add(action.id)
        out.append(action)
    return out


def evaluate_decision_tree(
    root: IDTNode,
    ctx: DecisionContext,
    observers: Optional[Iterable[EvaluationObserver]] = None,
    clock: Optional[Callable[[], str]] = None,
) -> DecisionResult:
    watchers = list(observers or [])
    trace: list[TraceEntry] = []
    collected: list[IDTAction] = []

    def record(entry: TraceEntry) -> None:
        trace.append(entry)
        notify_node(watchers, entry)

    def visit(node: IDTNode) -> bool:
        if node.condition is None:
            matched = True
            reason = REASON_NO_CONDITION
        else:
            try:
                matched = bool(evaluate_condition(node.condition, ctx))
                reason = REASON_TRUE if matched else REASON_FALSE
            except Exception as exc:
                matched = False
                reason = f"condition error: {exc}"
        record(TraceEntry(node_id=node.id, matched=matched, reason=reason))

        if not matched:
            return False

        if node.children:
            for child in node.children:
                if visit(child):
                    return True
            if node.fallback:
                collected.extend(node.fallback)
                return True

        collected.extend(node.actions)
        return True

    root_matched = visit(root)

    result = DecisionResult(
        trace=tuple(trace),
        actions=tuple(dedupe_actions(collected)),
        decision_timestamp=(clock or _utc_now_iso)(),
        context_snapshot=ctx,
        matched=root_matched,
    )
    notify_decision(watchers, result)
    return result
