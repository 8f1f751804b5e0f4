"""Ask business logic service."""
import asyncio
from typing import AsyncGenerator

import requests
from loguru import logger

from schemas.ask import StreamEvent
from services.streaming_service import format_sse_event, parse_upstream_payload
from src.bridge.xata_client import XataClient, XataError
from src.config.databases import DatabaseConfig


async def process_question_stream(
    database: DatabaseConfig, question: str, client: XataClient
) -> AsyncGenerator[str, None]:
    """
    Relays the hosted ask stream for one question as SSE.

    Flow:
    1. Open the ask stream against the database's lookup table
    2. Re-emit each upstream event as {answer?, records?, done?}
    3. On upstream failure, emit {error} then {done: true}

    Args:
        database: Selected database configuration
        question: User's question
        client: Bridge bound to the selected database

    Yields:
        SSE-formatted strings
    """
    loop = asyncio.get_event_loop()
    events = client.ask_stream(
        database.lookup_table, question, database.options.to_payload()
    )
    relayed = 0
    pending = None
    try:
        while True:
            # The bridge is synchronous; pull each payload in the thread pool.
            # Shielded so a disconnect cannot abandon a pull mid-flight.
            pending = loop.run_in_executor(None, next, events, None)
            payload = await asyncio.shield(pending)
            pending = None
            if payload is None:
                break
            event = parse_upstream_payload(payload)
            if event is None:
                continue
            relayed += 1
            yield format_sse_event(event)
            if event.is_terminal:
                break
    except (XataError, requests.RequestException) as e:
        logger.warning("Ask stream failed database={} error={}", database.id, e)
        yield format_sse_event(StreamEvent(error=str(e)))
        yield format_sse_event(StreamEvent(done=True))
    finally:
        if pending is not None and not pending.done():
            # Client went away while the worker is blocked on upstream
            _close_after(pending, events, loop)
        else:
            events.close()
        logger.info("Ask stream closed database={} events={}", database.id, relayed)


def _close_after(pending: asyncio.Future, events, loop: asyncio.AbstractEventLoop) -> None:
    """Close the upstream stream in the thread pool once the pending pull returns."""

    def close(future: asyncio.Future) -> None:
        if not future.cancelled() and future.exception() is not None:
            logger.debug("Upstream pull failed after disconnect: {}", future.exception())
        loop.run_in_executor(None, events.close)

    pending.add_done_callback(close)
