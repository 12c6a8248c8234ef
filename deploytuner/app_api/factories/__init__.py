from .build_app import build_tuner_app
from .policy_factory import build_policy

__all__ = [
    "build_tuner_app",
    "build_policy",
]
