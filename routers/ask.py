"""Ask router for the streaming question endpoint."""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger

from app.dependencies import get_client_factory
from schemas.ask import AskRequest
from schemas.common import ErrorResponse
from services.ask_service import process_question_stream
from services.docs_service import ClientFactory
from src.bridge.xata_client import XataError
from src.config.databases import get_database

router = APIRouter()


@router.post("/ask", responses={404: {"model": ErrorResponse}})
async def ask_question(
    request: AskRequest, client_factory: ClientFactory = Depends(get_client_factory)
):
    """
    Streaming SSE endpoint for questions against a configured database.

    Each event's data is JSON {answer?, records?, done?}. A records event is
    terminal; otherwise answer fragments accumulate until done is true.
    """
    database = get_database(request.database)
    if database is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error=f"Unknown database '{request.database}'").model_dump(),
        )
    try:
        client = client_factory(database)
    except XataError as e:
        raise HTTPException(status_code=e.status_code or 500, detail=str(e))

    logger.info("Ask database={} question={!r}", database.id, request.question)
    return StreamingResponse(
        process_question_stream(database, request.question, client),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
