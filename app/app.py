"""FastAPI application setup."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import ask, docs, health
from src.config.settings import get_settings

app = FastAPI(
    title="Ask Docs API",
    description="Streams answers from hosted document databases and resolves their sources",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ask.router, prefix="/api", tags=["Ask"])
app.include_router(docs.router, prefix="/api", tags=["Docs"])
app.include_router(health.router, tags=["Health"])
