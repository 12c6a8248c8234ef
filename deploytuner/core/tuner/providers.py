"""ConfigProvider implementations for the rule-based and advisor paths.

Responsibilities:
  - Rule path: build context, walk the policy tree, report the audit payload, translate.
  - Advisor path: fetch a raw advisor response and pass it through the safe parser.
  - Share one manual-approval gate between both paths.

Invariants:
  - Audit reporting is log-and-continue; it never changes the returned config.
  - Advisor failures resolve to the manual-approval fallback.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from ..domain.enums import AdaptivePolicy
from ..domain.models import AdaptiveConfig, DecisionContext, IDTNode
from ..engine.evaluator import evaluate_decision_tree
from ..engine.observers import EvaluationObserver
from ..engine.result import DecisionResult
from .ports import DecisionAuditSink
from .safe_parser import CONFIDENCE_THRESHOLD, fallback_config, safe_parse_adaptive_config
from .translator import translate_actions_to_config

logger = logging.getLogger(__name__)


def requires_manual_approval(config: AdaptiveConfig) -> bool:
    if config.policy == AdaptivePolicy.MANUAL_APPROVAL:
        return True
    return config.confidence < CONFIDENCE_THRESHOLD


def report_decision(sink: Optional[DecisionAuditSink], result: DecisionResult) -> Optional[str]:
    if sink is None:
        return None
    try:
        return sink.record_decision(result.as_audit_payload())
    except Exception:
        logger.exception(
            "Failed to record decision for project %s", result.context_snapshot.project
        )
        return None


class IdtConfigProvider:
    def __init__(
        self,
        root: IDTNode,
        context_source: Callable[[], DecisionContext],
        audit_sink: Optional[DecisionAuditSink] = None,
        observers: Iterable[EvaluationObserver] = (),
    ) -> None:
        self._root = root
        self._context_source = context_source
        self._audit_sink = audit_sink
        self._observers = list(observers)
        self.last_decision: Optional[DecisionResult] = None

    def evaluate(self, ctx: DecisionContext) -> AdaptiveConfig:
        decision = evaluate_decision_tree(self._root, ctx, observers=self._observers)
        self.last_decision = decision
        report_decision(self._audit_sink, decision)
        return translate_actions_to_config(list(decision.actions))

    def get_config(self) -> AdaptiveConfig:
        return self.evaluate(self._context_source())


class AdvisorConfigProvider:
    def __init__(self, fetch_raw: Callable[[], Any]) -> None:
        self._fetch_raw = fetch_raw

    def get_config(self) -> AdaptiveConfig:
        try:
            raw = self._fetch_raw()
        except Exception:
            logger.exception("Advisor request failed; falling back to manual approval")
            return fallback_config()
        return safe_parse_adaptive_config(raw)
