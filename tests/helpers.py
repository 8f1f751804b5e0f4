"""Fakes for requests sessions that stream SSE."""
import json
from unittest.mock import MagicMock


def sse_lines(*events):
    lines = []
    for event in events:
        data = event if isinstance(event, str) else json.dumps(event)
        lines.extend([f"data: {data}", ""])
    return lines


def sse_response(*events):
    resp = MagicMock()
    resp.iter_lines.return_value = iter(sse_lines(*events))
    resp.raise_for_status.return_value = None
    return resp


def json_response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = json.dumps(payload).encode("utf-8")
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def fake_session(*responses):
    session = MagicMock()
    session.post.side_effect = list(responses)
    return session
