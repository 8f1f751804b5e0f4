from __future__ import annotations

import threading
from typing import Callable, Dict, Optional

import requests
from loguru import logger

from src.client.accumulator import AnswerAccumulator, AnswerState, Listener
from src.config.settings import get_settings
from src.utils.sse import iter_sse_data


class AskClient:
    """
    Streams answers from ``POST /api/ask`` into an AnswerAccumulator.

    - One question/answer cycle is active at a time; asking again supersedes
      and closes the previous stream.
    - A terminal records event closes the HTTP response through ``cancel``
      rather than by raising.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        accumulator: Optional[AnswerAccumulator] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.ask_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.stream_timeout_seconds
        self.session = session or requests.Session()
        self.accumulator = accumulator or AnswerAccumulator()
        self._lock = threading.Lock()
        self._responses: Dict[int, requests.Response] = {}

    @property
    def state(self) -> AnswerState:
        return self.accumulator.state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.accumulator.subscribe(listener)

    def ask_question(self, database: str, question: str) -> Optional[AnswerState]:
        """
        Ask ``question`` against ``database`` and consume the answer stream.

        Returns None without issuing a request when the question is empty,
        otherwise the state of the cycle once its stream has closed.
        """
        if not question:
            logger.debug("Ignoring empty question")
            return None

        self.cancel()
        generation = self.accumulator.begin()
        logger.info("Asking database={} generation={}", database, generation)

        try:
            response = self.session.post(
                f"{self.base_url}/api/ask",
                json={"question": question, "database": database},
                headers={"Content-Type": "application/json", "Accept": "text/event-stream"},
                stream=True,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Ask request failed database={} error={}", database, exc)
            self.accumulator.fail(generation, f"Ask request failed: {exc}")
            return self.accumulator.state

        with self._lock:
            self._responses[generation] = response
        try:
            for data in iter_sse_data(response.iter_lines(decode_unicode=True)):
                if not self.accumulator.apply(generation, data):
                    break
        except requests.RequestException as exc:
            # A superseded cycle may see its connection torn down underneath it
            if self.accumulator.is_current(generation):
                logger.warning("Ask stream broke generation={} error={}", generation, exc)
        finally:
            self._close(generation)
            self.accumulator.end_stream(generation)

        return self.accumulator.state

    def cancel(self) -> None:
        """Stop the in-flight stream, if any, and close its connection."""
        self.accumulator.stop()
        with self._lock:
            generations = list(self._responses)
        for generation in generations:
            self._close(generation)

    def _close(self, generation: int) -> None:
        with self._lock:
            response = self._responses.pop(generation, None)
        if response is not None:
            response.close()
            logger.debug("Closed ask stream generation={}", generation)

    def clear_answer(self) -> None:
        self.cancel()
        self.accumulator.clear()

    def close(self) -> None:
        self.clear_answer()
        self.session.close()
