"""Document router for resolving referenced records and listing databases."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from app.dependencies import get_client_factory
from schemas.common import ErrorResponse
from schemas.databases import DatabaseSummary
from schemas.docs import DocsGetRequest, DocumentReference
from services.docs_service import ClientFactory, get_documents, list_databases
from src.bridge.xata_client import XataError
from src.config.databases import get_database, get_databases

router = APIRouter()


@router.post(
    "/docs-get",
    response_model=List[DocumentReference],
    responses={404: {"model": ErrorResponse}},
)
async def docs_get(
    request: DocsGetRequest, client_factory: ClientFactory = Depends(get_client_factory)
):
    """Return {id, title, slug} for each requested record, in request order."""
    database = get_database(request.database)
    if database is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error=f"Unknown database '{request.database}'").model_dump(),
        )
    if not request.ids:
        return []
    try:
        return await get_documents(database, request.ids, client_factory(database))
    except XataError as e:
        logger.warning("docs-get failed database={} error={}", database.id, e)
        raise HTTPException(status_code=502, detail=str(e))
    except ValidationError as e:
        logger.warning("docs-get got malformed records database={} errors={}", database.id, e.error_count())
        raise HTTPException(status_code=502, detail="Malformed records returned by database")


@router.get("/databases", response_model=List[DatabaseSummary])
async def databases(client_factory: ClientFactory = Depends(get_client_factory)):
    """List the configured databases with their record counts."""
    try:
        return await list_databases(get_databases(), client_factory)
    except XataError as e:
        logger.warning("Counting records failed error={}", e)
        raise HTTPException(status_code=502, detail=str(e))
