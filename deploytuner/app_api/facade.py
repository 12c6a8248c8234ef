from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from deploytuner.core.domain.models import AdaptiveConfig, IDTNode
from deploytuner.core.engine.observers import EvaluationObserver
from deploytuner.core.engine.result import DecisionResult
from deploytuner.core.tuner.providers import IdtConfigProvider
from .context_builder import build_decision_context
from .dto import SystemHealthInsight, VpsLogEntry, VpsSystemInfo
from .ports import DecisionAuditSink, FeedbackSummaryProvider

logger = logging.getLogger(__name__)


class AdaptiveTunerApplication:
    def __init__(
        self,
        policy: IDTNode,
        summary_provider: Optional[FeedbackSummaryProvider] = None,
        audit_sink: Optional[DecisionAuditSink] = None,
        observers: Iterable[EvaluationObserver] = (),
        policy_id: str = "",
        policy_version: str = "",
    ) -> None:
        self._policy = policy
        self._summary_provider = summary_provider
        self._audit_sink = audit_sink
        self._observers = list(observers)
        self._policy_id = policy_id
        self._policy_version = policy_version
        self.last_decision: Optional[DecisionResult] = None

    @property
    def policy(self) -> IDTNode:
        return self._policy

    def get_adaptive_config(
        self,
        health: SystemHealthInsight,
        system_info: VpsSystemInfo,
        logs: Sequence[VpsLogEntry],
        project: str,
    ) -> AdaptiveConfig:
        if not project or not project.strip():
            raise ValueError("project must be non-empty")
        ctx = build_decision_context(
            project,
            health,
            system_info,
            logs,
            summary_provider=self._summary_provider,
        )
        provider = IdtConfigProvider(
            self._policy,
            context_source=lambda: ctx,
            audit_sink=self._audit_sink,
            observers=self._observers,
        )
        config = provider.get_config()
        self.last_decision = provider.last_decision
        logger.info(
            "Adaptive config for %s via %s:%s -> %s (%s)",
            project,
            self._policy_id,
            self._policy_version,
            config.policy.value,
            config.reason,
        )
        return config
