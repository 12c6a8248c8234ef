from __future__ import annotations

import json

import pytest

from deploytuner.app_api.factories import build_policy
from deploytuner.core.domain.models import IDTNode
from deploytuner.core.policy.factory import PolicyFactory, default_policy_factory


def test_default_factory_keys() -> None:
    assert default_policy_factory.keys() == [("idt_default", "v1")]
    with pytest.raises(ValueError):
        default_policy_factory.create("idt_default", "dev")


def test_unknown_policy_raises() -> None:
    with pytest.raises(ValueError, match="Unknown policy_id/version"):
        default_policy_factory.create("idt_default", "v9")


def test_custom_registration() -> None:
    factory = PolicyFactory()
    factory.register("tiny", "v1", lambda thresholds: IDTNode(id="tiny"))

    assert factory.create("tiny", "v1").id == "tiny"
    with pytest.raises(ValueError, match="already registered"):
        factory.register("tiny", "v1", lambda thresholds: IDTNode(id="other"))


def test_build_policy_with_thresholds(tmp_path) -> None:
    path = tmp_path / "t.json"
    path.write_text(json.dumps({"cpuHighPct": 60}), encoding="utf-8")

    policy = build_policy(thresholds_path=path)

    assert policy.children[1].condition.threshold == 60.0


def test_build_policy_rejects_thresholds_for_unknown_version(tmp_path) -> None:
    path = tmp_path / "t.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError):
        build_policy(policy_version="v9", thresholds_path=path)
    with pytest.raises(ValueError):
        build_policy(policy_id="other", thresholds_path=path)
