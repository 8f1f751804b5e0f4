"""Shared FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends

from services.docs_service import ClientFactory
from src.bridge.xata_client import XataClient
from src.config.databases import DatabaseConfig
from src.config.settings import Settings, get_settings


@lru_cache()
def get_app_settings() -> Settings:
    """Return cached settings instance for FastAPI dependency injection."""
    return get_settings()


def get_client_factory(settings: Settings = Depends(get_app_settings)) -> ClientFactory:
    """Return a callable that builds a bridge for a configured database."""

    def factory(database: DatabaseConfig) -> XataClient:
        return XataClient.for_database(database, settings)

    return factory
