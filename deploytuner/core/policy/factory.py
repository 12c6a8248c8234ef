from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from deploytuner.core.domain.models import IDTNode
from deploytuner.core.policy.default_policy import build_default_policy
from deploytuner.core.policy.thresholds import PolicyThresholds

POLICY_ID_DEFAULT = "idt_default"
POLICY_VERSION_V1 = "v1"

PolicyBuilder = Callable[[Optional[PolicyThresholds]], IDTNode]


class PolicyFactory:
    """Registry of policy-tree builders keyed by (policy_id, version)."""

    def __init__(self) -> None:
        self._registry: Dict[Tuple[str, str], PolicyBuilder] = {}

    def register(self, policy_id: str, policy_version: str, builder: PolicyBuilder) -> None:
        key = (policy_id, policy_version)
        if key in self._registry:
            raise ValueError(f"Policy already registered: {policy_id}:{policy_version}")
        self._registry[key] = builder

    def create(
        self,
        policy_id: str,
        policy_version: str,
        thresholds: Optional[PolicyThresholds] = None,
    ) -> IDTNode:
        builder = self._registry.get((policy_id, policy_version))
        if builder is None:
            raise ValueError(f"Unknown policy_id/version: {policy_id}:{policy_version}")
        return builder(thresholds)

    def keys(self) -> list[Tuple[str, str]]:
        return sorted(self._registry)


default_policy_factory = PolicyFactory()
default_policy_factory.register(POLICY_ID_DEFAULT, POLICY_VERSION_V1, build_default_policy)

__all__ = [
    "PolicyBuilder",
    "PolicyFactory",
    "default_policy_factory",
    "POLICY_ID_DEFAULT",
    "POLICY_VERSION_V1",
]
