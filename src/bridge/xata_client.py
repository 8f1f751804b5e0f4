from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence

import requests
from loguru import logger

from src.config.databases import DatabaseConfig
from src.config.settings import Settings, get_settings
from src.utils.sse import iter_sse_data


class XataError(RuntimeError):
    """Raised when the hosted database rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class XataClient:
    """
    Bridge to one hosted Xata database over its REST API.

    - Auth via bearer API key.
    - Streams ask answers as raw SSE payloads, reads records by id, and
      counts table rows with the aggregate endpoint.
    """

    def __init__(
        self,
        database_url: str,
        api_key: str,
        branch: str = "main",
        timeout: float = 30.0,
        stream_timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.database_url = database_url.rstrip("/")
        self.branch = branch
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self.session = session or requests.Session()
        self._api_key = api_key
        logger.debug(
            "Initialized XataClient database_url={} branch={}", self.database_url, branch
        )

    @classmethod
    def for_database(
        cls, database: DatabaseConfig, settings: Optional[Settings] = None
    ) -> "XataClient":
        settings = settings or get_settings()
        if not settings.xata_api_key:
            raise XataError("XATA_API_KEY is required", status_code=503)
        return cls(
            database_url=database.database_url,
            api_key=settings.xata_api_key,
            branch=settings.xata_branch,
            timeout=settings.request_timeout_seconds,
            stream_timeout=settings.stream_timeout_seconds,
        )

    def _table_url(self, table: str, action: str) -> str:
        return f"{self.database_url}:{self.branch}/tables/{table}/{action}"

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": accept,
        }

    def _post_json(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.post(
                url, json=payload, headers=self._headers(), timeout=self.timeout
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise XataError(f"Xata request failed: {exc}", status_code=status) from exc
        except requests.RequestException as exc:
            raise XataError(f"Xata request failed: {exc}") from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise XataError(f"Xata returned a non-JSON body: {exc}") from exc

    def ask_stream(
        self, table: str, question: str, options: Optional[Dict[str, Any]] = None
    ) -> Iterator[str]:
        """
        Ask a question against ``table`` and yield each raw SSE data payload.

        The HTTP response is closed when the generator is exhausted or closed.
        """
        url = self._table_url(table, "ask")
        payload = {"question": question, **(options or {})}
        logger.info("Asking table={} question_length={}", table, len(question))
        try:
            resp = self.session.post(
                url,
                json=payload,
                headers=self._headers(accept="text/event-stream"),
                stream=True,
                timeout=self.stream_timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise XataError(f"Xata ask failed: {exc}", status_code=status) from exc
        except requests.RequestException as exc:
            raise XataError(f"Xata ask failed: {exc}") from exc

        with resp:
            try:
                for data in iter_sse_data(resp.iter_lines(decode_unicode=True)):
                    logger.debug("Received ask payload length={}", len(data))
                    yield data
            except requests.RequestException as exc:
                raise XataError(f"Xata ask stream broke: {exc}") from exc

    def read_records(
        self,
        table: str,
        ids: Sequence[str],
        columns: Sequence[str] = ("id", "title", "slug"),
    ) -> List[Dict[str, Any]]:
        """Fetch records by id, returned in the order of ``ids``."""
        if not ids:
            return []
        body = {
            "columns": list(columns),
            "filter": {"id": {"$any": list(ids)}},
            "page": {"size": len(ids)},
        }
        data = self._post_json(self._table_url(table, "query"), body)
        by_id = {}
        for record in data.get("records", []) or []:
            by_id[record.get("id")] = {c: record.get(c) for c in columns}
        missing = [i for i in ids if i not in by_id]
        if missing:
            logger.warning("Records not found table={} ids={}", table, missing)
        logger.debug("Read {} of {} records from table={}", len(by_id), len(ids), table)
        return [by_id[i] for i in ids if i in by_id]

    def count_records(self, table: str) -> int:
        data = self._post_json(
            self._table_url(table, "aggregate"),
            {"aggs": {"total": {"count": "*"}}},
        )
        total = (data.get("aggs") or {}).get("total")
        if not isinstance(total, int):
            raise XataError(f"Unexpected aggregate response for table {table}")
        logger.debug("Counted {} records in table={}", total, table)
        return total
