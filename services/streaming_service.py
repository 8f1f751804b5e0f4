"""SSE streaming utilities."""
import json
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from schemas.ask import StreamEvent
from src.utils.sse import format_sse


def format_sse_event(event: StreamEvent) -> str:
    """
    Serialize a stream event as an SSE message.

    Args:
        event: Event to send; unset fields are omitted

    Returns:
        SSE-formatted string: "data: {...}\n\n"
    """
    return format_sse(event.to_sse_json())


def parse_upstream_payload(payload: str) -> Optional[StreamEvent]:
    """
    Project a raw upstream ask payload onto a StreamEvent.

    Returns None for payloads that are not JSON objects; those are dropped.
    """
    try:
        data = json.loads(payload)
    except ValueError:
        logger.debug("Dropping non-JSON upstream payload: {!r}", payload[:80])
        return None
    if not isinstance(data, dict):
        logger.debug("Dropping non-object upstream payload: {!r}", payload[:80])
        return None
    try:
        return StreamEvent.model_validate(data)
    except ValidationError as exc:
        logger.debug("Dropping malformed upstream payload: {}", exc.errors()[:1])
        return None
