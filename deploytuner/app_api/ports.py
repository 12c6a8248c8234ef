"""Port definitions for app-level dependencies.

Responsibilities:
  - Define interface contracts for historical feedback and decision auditing.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Optional, Protocol

from deploytuner.core.tuner.ports import ConfigProvider, DecisionAuditSink
from .dto import FeedbackSummary


class FeedbackSummaryProvider(Protocol):
    def get_summary(self, project: str) -> Optional[FeedbackSummary]:
        ...


__all__ = ["ConfigProvider", "DecisionAuditSink", "FeedbackSummaryProvider"]
