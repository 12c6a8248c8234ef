"""Auto-deploy scheduling driven by an AdaptiveConfig.

Responsibilities:
  - Refuse to auto-deploy when the config requires manual approval.
  - Arm a cancelable timer for DELAYED (config delay) or IMMEDIATE (no delay) policies.
Must not:
  - Inspect how the config was produced; rule-based and advisor configs are treated alike.

Invariants:
  - At most one pending deploy timer; scheduling again replaces it.
  - Cancel only clears the timer; no work is in flight during the delay.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Protocol

from deploytuner.core.domain.enums import AdaptivePolicy
from deploytuner.core.domain.models import AdaptiveConfig
from deploytuner.core.tuner.providers import requires_manual_approval
from deploytuner.core.tuner.safe_parser import confidence_percent

logger = logging.getLogger(__name__)

ScheduleStatus = Literal["scheduled", "manual_required", "disabled"]


class TimerHandle(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], Any]], TimerHandle]


def _thread_timer(interval: float, fn: Callable[[], Any]) -> TimerHandle:
    timer = threading.Timer(interval, fn)
    timer.daemon = True
    return timer


@dataclass(frozen=True)
class ScheduleOutcome:
    status: ScheduleStatus
    delay_seconds: float
    reason: str


class AutoDeployScheduler:
    def __init__(
        self,
        deploy: Callable[[], Any],
        timer_factory: Optional[TimerFactory] = None,
        enabled: bool = True,
    ) -> None:
        self._deploy = deploy
        self._timer_factory = timer_factory or _thread_timer
        self._enabled = enabled
        self._pending: Optional[TimerHandle] = None
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False
        self.cancel()

    def cancel(self) -> bool:
        with self._lock:
            pending = self._pending
            self._pending = None
        if pending is None:
            return False
        pending.cancel()
        logger.info("Pending auto-deploy cancelled")
        return True

    def _fire(self, handle_box: list[TimerHandle]) -> None:
        with self._lock:
            if not handle_box or self._pending is not handle_box[0]:
                return
            self._pending = None
        self._deploy()

    def schedule(self, config: AdaptiveConfig) -> ScheduleOutcome:
        if not self._enabled:
            return ScheduleOutcome(status="disabled", delay_seconds=0, reason="Auto-deploy is disabled.")

        if requires_manual_approval(config):
            if config.policy == AdaptivePolicy.MANUAL_APPROVAL:
                reason = config.reason or "Policy requires manual approval."
            else:
                reason = f"Confidence is too low ({confidence_percent(config.confidence)}%)."
            logger.warning("Manual approval required: %s", reason)
            self.disable()
            return ScheduleOutcome(status="manual_required", delay_seconds=0, reason=reason)

        delay = float(config.deploy_delay_in_seconds) if config.policy == AdaptivePolicy.DELAYED else 0.0
        delay = max(0.0, delay)

        box: list[TimerHandle] = []
        handle = self._timer_factory(delay, lambda: self._fire(box))
        box.append(handle)

        with self._lock:
            previous = self._pending
            self._pending = handle
        if previous is not None:
            previous.cancel()
        handle.start()

        if config.policy == AdaptivePolicy.DELAYED:
            logger.info("Deployment delayed by %ss: %s", delay, config.reason)
        else:
            logger.info("Auto-deploy initiating")
        return ScheduleOutcome(status="scheduled", delay_seconds=delay, reason=config.reason)
