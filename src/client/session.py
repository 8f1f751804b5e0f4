from __future__ import annotations

from typing import List, Optional

import requests
from loguru import logger

from schemas.databases import DatabaseSummary
from schemas.docs import DocumentReference
from src.client.accumulator import AnswerState, CyclePhase
from src.client.ask_client import AskClient
from src.client.resolver import ReferenceResolver
from src.config.settings import get_settings


class AskSession:
    """
    One user's ask page: streams an answer, then resolves the documents it cites.

    Idle -> Streaming -> (records) ResolvingReferences -> Idle
                      -> (done) Idle
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.ask_api_base_url).rstrip("/")
        self.http = session or requests.Session()
        self.asker = AskClient(base_url=self.base_url, session=self.http)
        self.resolver = ReferenceResolver(base_url=self.base_url, session=self.http)

    @property
    def state(self) -> AnswerState:
        return self.asker.state

    @property
    def related_docs(self) -> List[DocumentReference]:
        return self.resolver.related_docs

    def subscribe(self, listener):
        return self.asker.subscribe(listener)

    def ask(self, database: str, question: str) -> Optional[AnswerState]:
        """Ask a question and resolve its references once the stream names them."""
        cycle = self.resolver.clear_related()
        state = self.asker.ask_question(database, question)
        if state is None:
            return None

        accumulator = self.asker.accumulator
        if state.records and accumulator.is_current(state.generation):
            accumulator.transition(state.generation, CyclePhase.RESOLVING_REFERENCES)
            self.resolver.update(database, state.records, cycle=cycle)
        accumulator.transition(state.generation, CyclePhase.IDLE)
        return self.state

    def cancel(self) -> None:
        self.asker.cancel()

    def clear(self) -> None:
        self.asker.clear_answer()
        self.resolver.clear_related()

    def list_databases(self) -> List[DatabaseSummary]:
        resp = self.http.get(
            f"{self.base_url}/api/databases",
            timeout=get_settings().request_timeout_seconds,
        )
        resp.raise_for_status()
        databases = [DatabaseSummary.model_validate(item) for item in resp.json()]
        logger.debug("Loaded {} databases", len(databases))
        return databases

    def close(self) -> None:
        self.clear()
        self.http.close()
