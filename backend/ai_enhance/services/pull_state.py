from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from ai_enhance.models.ai import PullProgressEvent, PullStatus
from ai_enhance.services.enhancement import PULL_COMPLETE_EVENT, PULL_PROGRESS_EVENT

logger = logging.getLogger(__name__)

PULL_ERROR_EVENT = "ai-model-pull-error"

# Recent events replayed to a new SSE subscriber; older ticks are dropped
MAX_BUFFERED_EVENTS = 100
MAX_FINISHED_PULLS = 16


@dataclass
class PullState:
    """Event sink for one model pull, polled by the SSE progress stream."""

    model_id: str
    state: str = "idle"
    last_event: PullProgressEvent | None = None
    error: str | None = None
    # (sequence number, event name, payload), oldest first
    events: deque[tuple[int, str, Any]] = field(
        default_factory=lambda: deque(maxlen=MAX_BUFFERED_EVENTS)
    )
    _seq: int = 0

    @property
    def finished(self) -> bool:
        return self.state in ("complete", "error")

    def reset(self) -> None:
        self.state = "pulling"
        self.last_event = None
        self.error = None
        self.events.clear()
        self._seq = 0

    def events_after(self, seq: int) -> list[tuple[int, str, Any]]:
        return [e for e in self.events if e[0] > seq]

    def _emit(self, name: str, payload: Any) -> None:
        self._seq += 1
        self.events.append((self._seq, name, payload))

    def on_progress(self, event: PullProgressEvent) -> None:
        self.last_event = event
        self._emit(PULL_PROGRESS_EVENT, event.model_dump())

    def on_complete(self, model_id: str) -> None:
        self.state = "complete"
        self._emit(PULL_COMPLETE_EVENT, model_id)

    def on_error(self, message: str) -> None:
        self.state = "error"
        self.error = message
        self._emit(PULL_ERROR_EVENT, {"model_id": self.model_id, "error": message})

    def to_status(self) -> PullStatus:
        return PullStatus(
            state=self.state,
            model_id=self.model_id,
            last_event=self.last_event,
            error=self.error,
        )


class PullStateRegistry:
    def __init__(self, max_finished: int = MAX_FINISHED_PULLS) -> None:
        self.max_finished = max_finished
        self._states: dict[str, PullState] = {}

    def begin(self, model_id: str) -> PullState:
        state = self._states.pop(model_id, None) or PullState(model_id)
        state.reset()
        # Most recently started last, so eviction drops the oldest first
        self._states[model_id] = state
        self._evict_finished()
        return state

    def _evict_finished(self) -> None:
        finished = [m for m, s in self._states.items() if s.finished]
        for model_id in finished[: max(0, len(finished) - self.max_finished)]:
            logger.debug("Forgetting finished pull state for %s", model_id)
            del self._states[model_id]

    def get(self, model_id: str) -> PullState | None:
        return self._states.get(model_id)

    def status(self, model_id: str) -> PullStatus:
        state = self._states.get(model_id)
        if state is None:
            return PullStatus(state="idle", model_id=model_id)
        return state.to_status()
