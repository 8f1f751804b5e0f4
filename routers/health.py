"""Health check router."""
from fastapi import APIRouter

from schemas.common import HealthResponse
from src.config.databases import get_databases

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ask-docs-api", "databases": len(get_databases())}
