from __future__ import annotations

import threading
from typing import List, Optional, Sequence, Tuple

import requests
from loguru import logger
from pydantic import ValidationError

from schemas.docs import DocumentReference, DocumentReferenceList
from src.config.settings import get_settings


class ReferenceResolver:
    """Resolves referenced record ids into titles and links via ``POST /api/docs-get``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.ask_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.session = session or requests.Session()
        self._lock = threading.Lock()
        self._generation = 0
        self._last_key: Optional[Tuple[str, Tuple[str, ...]]] = None
        self._related: List[DocumentReference] = []

    @property
    def related_docs(self) -> List[DocumentReference]:
        return list(self._related)

    def update(
        self,
        database: str,
        ids: Optional[Sequence[str]],
        cycle: Optional[int] = None,
    ) -> List[DocumentReference]:
        """
        Resolve ``ids`` when they differ from the last resolved list.

        An empty list clears the references without a request. ``cycle`` is the
        token returned by ``clear_related``; when another clear has happened
        since, the update is stale and is skipped.
        """
        ids = list(ids or [])
        key = (database, tuple(ids))
        if not ids:
            self.clear_related()
            return []
        if key == self._last_key:
            return self.related_docs

        with self._lock:
            if cycle is not None and cycle != self._generation:
                logger.debug("Skipping stale reference update database={}", database)
                return list(self._related)
            self._generation += 1
            generation = self._generation
            self._last_key = key

        related = self._fetch(database, ids)
        with self._lock:
            # Cleared or superseded while the request was in flight
            if generation == self._generation:
                self._related = related
        return self.related_docs

    def _fetch(self, database: str, ids: List[str]) -> List[DocumentReference]:
        try:
            resp = self.session.post(
                f"{self.base_url}/api/docs-get",
                json={"database": database, "ids": ids},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            related = DocumentReferenceList.validate_json(resp.content)
        except ValidationError as exc:
            logger.warning(
                "Discarding malformed references database={} errors={}",
                database,
                exc.error_count(),
            )
            return []
        except requests.RequestException as exc:
            logger.warning("Reference lookup failed database={} error={}", database, exc)
            return []
        logger.debug("Resolved {} references for database={}", len(related), database)
        return related

    def clear_related(self) -> int:
        """Drop resolved references; returns a token for the next ``update``."""
        with self._lock:
            self._generation += 1
            self._last_key = None
            self._related = []
            return self._generation
