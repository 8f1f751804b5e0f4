"""Tests for the Xata REST bridge with a mocked requests session."""
from unittest.mock import MagicMock

import pytest
import requests

from helpers import json_response, sse_response
from src.bridge.xata_client import XataClient, XataError
from src.config.databases import get_database
from src.config.settings import Settings

DB_URL = "https://ws.us-east-1.xata.sh/db/docs"


def make_client(session):
    return XataClient(database_url=DB_URL, api_key="xau_key", branch="main", session=session)


class TestAskStream:
    def test_yields_raw_payloads_and_posts_options(self):
        session = MagicMock()
        session.post.return_value = sse_response({"answer": "a"}, {"records": ["r"]})
        client = make_client(session)
        options = {"rules": ["be nice"], "searchType": "keyword"}

        payloads = list(client.ask_stream("docs", "What?", options))

        assert payloads == ['{"answer": "a"}', '{"records": ["r"]}']
        args, kwargs = session.post.call_args
        assert args[0] == f"{DB_URL}:main/tables/docs/ask"
        assert kwargs["json"] == {"question": "What?", **options}
        assert kwargs["headers"]["Authorization"] == "Bearer xau_key"
        assert kwargs["headers"]["Accept"] == "text/event-stream"
        assert kwargs["stream"] is True

    def test_http_error_raises_xata_error_with_status(self):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError(
            "401", response=MagicMock(status_code=401)
        )
        session = MagicMock()
        session.post.return_value = resp
        with pytest.raises(XataError) as exc:
            list(make_client(session).ask_stream("docs", "q"))
        assert exc.value.status_code == 401


class TestReadRecords:
    def test_returns_records_in_requested_order(self):
        session = MagicMock()
        session.post.return_value = json_response({
            "records": [
                {"id": "b", "title": "B", "slug": "sb", "xata": {"version": 1}},
                {"id": "a", "title": "A", "slug": "sa"},
            ]
        })
        records = make_client(session).read_records("docs", ["a", "b", "missing"])
        assert records == [
            {"id": "a", "title": "A", "slug": "sa"},
            {"id": "b", "title": "B", "slug": "sb"},
        ]
        body = session.post.call_args.kwargs["json"]
        assert body["filter"] == {"id": {"$any": ["a", "b", "missing"]}}
        assert body["columns"] == ["id", "title", "slug"]

    def test_empty_ids_skip_request(self):
        session = MagicMock()
        assert make_client(session).read_records("docs", []) == []
        session.post.assert_not_called()

    def test_connection_error_raises_xata_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(XataError):
            make_client(session).read_records("docs", ["a"])


class TestCountRecords:
    def test_returns_total(self):
        session = MagicMock()
        session.post.return_value = json_response({"aggs": {"total": 4321}})
        assert make_client(session).count_records("docs") == 4321
        args, kwargs = session.post.call_args
        assert args[0] == f"{DB_URL}:main/tables/docs/aggregate"
        assert kwargs["json"] == {"aggs": {"total": {"count": "*"}}}

    def test_unexpected_shape_raises(self):
        session = MagicMock()
        session.post.return_value = json_response({"aggs": {}})
        with pytest.raises(XataError):
            make_client(session).count_records("docs")


def test_for_database_requires_api_key():
    database = get_database("netlifyDocs")
    with pytest.raises(XataError) as exc:
        XataClient.for_database(database, Settings(XATA_API_KEY=None))
    assert exc.value.status_code == 503


def test_for_database_uses_settings():
    database = get_database("netlifyDocs")
    client = XataClient.for_database(
        database, Settings(XATA_API_KEY="xau_1", XATA_BRANCH="dev")
    )
    assert client.database_url == database.database_url
    assert client.branch == "dev"
