from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schemas.ask import StreamEvent


class CyclePhase(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    TERMINATED_BY_DONE = "terminated_by_done"
    TERMINATED_BY_RECORDS = "terminated_by_records"
    RESOLVING_REFERENCES = "resolving_references"


class AnswerState(BaseModel):
    """Immutable snapshot of one question/answer cycle, handed to renderers."""

    model_config = ConfigDict(frozen=True)

    generation: int = 0
    phase: CyclePhase = CyclePhase.IDLE
    is_loading: bool = False
    answer: Optional[str] = None
    records: List[str] = Field(default_factory=list)
    error: Optional[str] = None


Listener = Callable[[AnswerState], None]


class AnswerAccumulator:
    """
    State machine that folds a stream of ask events into an answer.

    Every cycle is stamped with an increasing generation number. Updates
    tagged with a superseded generation are ignored, so a late event from an
    earlier question can never leak into the current answer.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._generation = 0
        self._stopped = True
        self._state = AnswerState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AnswerState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with each new state; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes) -> AnswerState:
        # Caller holds the lock
        self._state = self._state.model_copy(update=changes)
        return self._state

    def _notify(self, state: Optional[AnswerState]) -> None:
        """Call listeners with ``state``; never invoked while holding the lock."""
        if state is None:
            return
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def accepts(self, generation: int) -> bool:
        """True while events for ``generation`` should still be consumed."""
        with self._lock:
            return self.is_current(generation) and not self._stopped

    def begin(self) -> int:
        """Start a new cycle, invalidating any earlier one."""
        with self._lock:
            self._generation += 1
            self._stopped = False
            generation = self._generation
            self._state = AnswerState(
                generation=generation, phase=CyclePhase.STREAMING, is_loading=True
            )
            state = self._state
        logger.debug("Started answer cycle generation={}", generation)
        self._notify(state)
        return generation

    def apply(self, generation: int, event: Union[str, StreamEvent]) -> bool:
        """
        Fold one event into the answer.

        Returns False once the cycle should stop consuming the stream: the
        event was terminal, or the cycle has been superseded or stopped.
        """
        if not self.accepts(generation):
            logger.debug("Ignoring event for stale generation={}", generation)
            return False

        if isinstance(event, str):
            try:
                event = StreamEvent.model_validate_json(event)
            except ValidationError:
                logger.debug("Dropping unparseable event: {!r}", event[:80])
                return True

        with self._lock:
            if not self.accepts(generation):
                return False
            if event.records:
                self._stopped = True
                state = self._update(
                    records=list(event.records),
                    phase=CyclePhase.TERMINATED_BY_RECORDS,
                )
            else:
                changes = {
                    "answer": f"{self._state.answer or ''}{event.answer or ''}",
                    "is_loading": not event.done,
                }
                if event.done:
                    changes["phase"] = CyclePhase.TERMINATED_BY_DONE
                if event.error:
                    changes["error"] = event.error
                state = self._update(**changes)
        self._notify(state)

        if event.error:
            logger.warning("Ask stream reported error: {}", event.error)
        if event.records:
            logger.info(
                "Answer cycle generation={} referenced {} records",
                generation,
                len(event.records),
            )
            return False
        return True

    def stop(self, generation: Optional[int] = None) -> None:
        """Stop consuming events for the current cycle, keeping its state."""
        with self._lock:
            if generation is None or self.is_current(generation):
                self._stopped = True

    def end_stream(self, generation: int) -> None:
        """Mark the transport closed; loading always ends with the stream."""
        state = None
        with self._lock:
            if self.is_current(generation):
                self._stopped = True
                changes = {"is_loading": False}
                if self._state.phase == CyclePhase.STREAMING:
                    changes["phase"] = CyclePhase.IDLE
                state = self._update(**changes)
        self._notify(state)

    def fail(self, generation: int, message: str) -> None:
        state = None
        with self._lock:
            if self.is_current(generation):
                self._stopped = True
                state = self._update(is_loading=False, phase=CyclePhase.IDLE, error=message)
        self._notify(state)

    def transition(self, generation: int, phase: CyclePhase) -> None:
        state = None
        with self._lock:
            if self.is_current(generation):
                state = self._update(phase=phase)
        self._notify(state)

    def clear(self) -> None:
        """Discard the answer, loading flag and records, and invalidate any cycle."""
        with self._lock:
            self._generation += 1
            self._stopped = True
            self._state = AnswerState(generation=self._generation)
            state = self._state
        self._notify(state)
