from __future__ import annotations

import logging
from typing import Callable, Iterable, Protocol

from .result import DecisionResult, TraceEntry

logger = logging.getLogger(__name__)


class EvaluationObserver(Protocol):
    def on_node(self, entry: TraceEntry) -> None:
        ...

    def on_decision(self, result: DecisionResult) -> None:
        ...


class CallbackObserver:
    """Adapts a plain line-printing callback (e.g. a CLI debug printer) to an observer."""

    def __init__(self, fn: Callable[[str], None]) -> None:
        self._fn = fn

    def on_node(self, entry: TraceEntry) -> None:
        self._fn(f"IDT_NODE node={entry.node_id} matched={entry.matched} reason={entry.reason}")

    def on_decision(self, result: DecisionResult) -> None:
        self._fn(
            f"IDT_DECISION project={result.context_snapshot.project} "
            f"actions={','.join(result.action_ids())} at={result.decision_timestamp}"
        )


class RecordingObserver:
    def __init__(self) -> None:
        self.entries: list[TraceEntry] = []
        self.decisions: list[DecisionResult] = []

    def on_node(self, entry: TraceEntry) -> None:
        self.entries.append(entry)

    def on_decision(self, result: DecisionResult) -> None:
        self.decisions.append(result)


def notify_node(observers: Iterable[EvaluationObserver], entry: TraceEntry) -> None:
    for observer in observers:
        try:
            observer.on_node(entry)
        except Exception:
            logger.exception("Evaluation observer failed on node %s", entry.node_id)


def notify_decision(observers: Iterable[EvaluationObserver], result: DecisionResult) -> None:
    for observer in observers:
        try:
            observer.on_decision(result)
        except Exception:
            logger.exception("Evaluation observer failed on decision")
