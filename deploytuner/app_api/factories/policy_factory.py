"""Factory for creating policy trees from app configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from deploytuner.core.domain.models import IDTNode
from deploytuner.core.policy.factory import (
    POLICY_ID_DEFAULT,
    POLICY_VERSION_V1,
    default_policy_factory,
)
from deploytuner.core.policy.thresholds import load_policy_thresholds


def build_policy(
    *,
    policy_id: str = POLICY_ID_DEFAULT,
    policy_version: str = POLICY_VERSION_V1,
    thresholds_path: Optional[str | Path] = None,
) -> IDTNode:
    """Composition root: build a policy tree by id/version, optionally with a thresholds file."""
    thresholds = load_policy_thresholds(thresholds_path) if thresholds_path is not None else None
    return default_policy_factory.create(policy_id, policy_version, thresholds)
