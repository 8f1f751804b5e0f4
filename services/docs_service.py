"""Document lookup and database catalog services."""
import asyncio
from typing import Callable, Dict, List

from loguru import logger

from schemas.databases import DatabaseSummary
from schemas.docs import DocumentReference, DocumentReferenceList
from src.bridge.xata_client import XataClient
from src.config.databases import DatabaseConfig

ClientFactory = Callable[[DatabaseConfig], XataClient]

# Record counts are computed once per process, like a build-time snapshot
_record_counts: Dict[str, int] = {}


async def get_documents(
    database: DatabaseConfig, ids: List[str], client: XataClient
) -> List[DocumentReference]:
    """
    Resolve record ids into display metadata.

    Args:
        database: Selected database configuration
        ids: Record identifiers, in display order
        client: Bridge bound to the selected database

    Returns:
        References in the order of ``ids``; ids that no longer exist are skipped
    """
    if not ids:
        return []
    loop = asyncio.get_event_loop()
    records = await loop.run_in_executor(
        None, client.read_records, database.lookup_table, ids
    )
    return DocumentReferenceList.validate_python(records)


async def list_databases(
    databases: List[DatabaseConfig], client_factory: ClientFactory
) -> List[DatabaseSummary]:
    """Return every configured database with its (cached) record count."""
    loop = asyncio.get_event_loop()
    summaries = []
    for database in databases:
        count = _record_counts.get(database.id)
        if count is None:
            client = client_factory(database)
            count = await loop.run_in_executor(
                None, client.count_records, database.lookup_table
            )
            _record_counts[database.id] = count
            logger.info("Cached record count database={} count={}", database.id, count)
        summaries.append(
            DatabaseSummary(id=database.id, name=database.name, record_count=count)
        )
    return summaries


def reset_record_counts() -> None:
    _record_counts.clear()
