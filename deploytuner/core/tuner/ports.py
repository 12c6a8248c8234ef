"""Port definitions for tuner collaborators.

Responsibilities:
  - Define the capability every AdaptiveConfig source implements.
  - Define the audit sink the rule-based path reports decisions to.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from ..domain.models import AdaptiveConfig


class ConfigProvider(Protocol):
    def get_config(self) -> AdaptiveConfig:
        ...


class DecisionAuditSink(Protocol):
    def record_decision(self, payload: dict[str, Any]) -> Optional[str]:
        ...
