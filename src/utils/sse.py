"""Server-sent event framing helpers shared by the bridge and the client."""
from __future__ import annotations

from typing import Iterable, Iterator, List, Optional


def format_sse(data: str) -> str:
    """Frame a payload as a single SSE message with double newline."""
    lines = data.splitlines() or [""]
    return "".join(f"data: {line}\n" for line in lines) + "\n"


def iter_sse_data(lines: Iterable[Optional[str | bytes]]) -> Iterator[str]:
    """
    Yield the ``data`` payload of each event from an SSE line stream.

    Accepts the output of ``requests.Response.iter_lines``. Multi-line data
    fields are joined with ``\\n``; comments and other fields are ignored.
    An event left unterminated when the stream ends is discarded.
    """
    buffer: List[str] = []
    for raw in lines:
        if raw is None:
            continue
        line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        line = line.rstrip("\r")

        if not line:
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if field != "data":
            continue
        if value.startswith(" "):
            value = value[1:]
        buffer.append(value)
