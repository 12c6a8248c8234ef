"""Validation of AdaptiveConfig values from untrusted advisors.

Responsibilities:
  - Turn an arbitrary raw value (object or JSON text) into a safe AdaptiveConfig.
  - Gate low-confidence advice behind manual approval.

Inputs/Outputs:
  - Inputs: anything an out-of-process advisor returned.
  - Outputs: an AdaptiveConfig; malformed input yields the manual-approval fallback.

Invariants:
  - Never raises.
  - Any doubt resolves to MANUAL_APPROVAL, never to an unattended deploy.
"""

from __future__ import annotations

import datetime
import json
import logging
import math
from typing import Any, Mapping, Optional

from ..domain.enums import AdaptivePolicy
from ..domain.models import AdaptiveConfig

logger = logging.getLogger(__name__)

CONFIDENCE_THRESHOLD = 0.6

FALLBACK_REASON = "Fallback to MANUAL_APPROVAL due to an invalid or uncertain AI response."
INVALID_CONFIDENCE_REASON = "Fallback: AI response contained an invalid confidence score."
FALLBACK_SUGGESTION = "Manual review of system logs and metrics is required before proceeding."
DEFAULT_REASON = "No specific reason provided by AI."
DEFAULT_COOLDOWN_SECONDS = 300
DEFAULT_MAX_CONCURRENT_DEPLOYS = 1

_POLICY_VALUES = {policy.value for policy in AdaptivePolicy}


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (math.isnan(value) or math.isinf(value))


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def _is_list_of_str(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _coerce_confidence(value: Any) -> Optional[float]:
    if _is_number(value):
        return float(value)
    if _is_text(value):
        try:
            parsed = float(value)
        except ValueError:
            return None
        if math.isnan(parsed) or math.isinf(parsed):
            return None
        return parsed
    return None


def confidence_percent(confidence: float) -> int:
    """Whole percent for display, rounding halves up."""
    return int(math.floor(confidence * 100 + 0.5))


def fallback_config(
    now: Optional[str] = None,
    reason: str = FALLBACK_REASON,
    confidence: float = 0.0,
) -> AdaptiveConfig:
    return AdaptiveConfig(
        policy=AdaptivePolicy.MANUAL_APPROVAL,
        deploy_delay_in_seconds=0,
        reason=reason,
        confidence=confidence,
        suggested_actions=(FALLBACK_SUGGESTION,),
        cooldown_seconds=DEFAULT_COOLDOWN_SECONDS,
        max_concurrent_deploys=DEFAULT_MAX_CONCURRENT_DEPLOYS,
        generated_at=now or _utc_now_iso(),
    )


def _parse(raw: Any, now: Optional[str]) -> AdaptiveConfig:
    obj = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
    if not isinstance(obj, Mapping):
        return fallback_config(now)

    policy_value = obj.get("policy")
    if not isinstance(policy_value, str) or policy_value not in _POLICY_VALUES:
        return fallback_config(now)

    confidence = _coerce_confidence(obj.get("confidence"))
    if confidence is None or confidence < 0.0 or confidence > 1.0:
        return fallback_config(now, reason=INVALID_CONFIDENCE_REASON)

    if confidence < CONFIDENCE_THRESHOLD:
        ai_reason = obj.get("reason") or "N/A"
        return fallback_config(
            now,
            reason=f'Low confidence ({confidence_percent(confidence)}%). AI reasoning: "{ai_reason}"',
            confidence=confidence,
        )

    # Older advisors send delaySeconds; only a missing key falls through to it.
    delay = obj.get("deployDelayInSeconds")
    if delay is None:
        delay = obj.get("delaySeconds")
    cooldown = obj.get("cooldownSeconds")
    max_concurrent = obj.get("maxConcurrentDeploys")
    reason = obj.get("reason")
    suggested = obj.get("suggestedActions")
    generated_at = obj.get("generatedAt")

    return AdaptiveConfig(
        policy=AdaptivePolicy(policy_value),
        deploy_delay_in_seconds=delay if _is_number(delay) and delay >= 0 else 0,
        reason=reason if _is_text(reason) else DEFAULT_REASON,
        confidence=confidence,
        suggested_actions=tuple(suggested) if _is_list_of_str(suggested) else (),
        cooldown_seconds=cooldown if _is_number(cooldown) and cooldown >= 0 else DEFAULT_COOLDOWN_SECONDS,
        max_concurrent_deploys=(
            max_concurrent
            if _is_number(max_concurrent) and max_concurrent > 0
            else DEFAULT_MAX_CONCURRENT_DEPLOYS
        ),
        generated_at=generated_at if _is_text(generated_at) else (now or _utc_now_iso()),
    )


def safe_parse_adaptive_config(raw: Any, now: Optional[str] = None) -> AdaptiveConfig:
    try:
        return _parse(raw, now)
    except Exception as exc:
        logger.warning("Advisor config rejected: %s", exc)
        return fallback_config(now)
