"""Static configuration of the document databases the demo can ask."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SearchOptions(BaseModel):
    fuzziness: int = 1
    prefix: str = "phrase"


class AskOptions(BaseModel):
    """Options forwarded to the hosted ask endpoint with every question."""

    rules: List[str] = Field(default_factory=list)
    search_type: str = "keyword"
    search: SearchOptions = Field(default_factory=SearchOptions)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "rules": list(self.rules),
            "searchType": self.search_type,
            "search": self.search.model_dump(),
        }


class DatabaseConfig(BaseModel):
    id: str
    name: str
    database_url: str
    lookup_table: str
    options: AskOptions = Field(default_factory=AskOptions)


NETLIFY_RULES = [
    "You are a friendly chat bot that answers questions about the Netlify platform.",
    "Only answer questions that are relating to the defined context or are general "
    "technical questions. If asked about a question outside of the context, you can "
    "respond with \"It doesn't look like I have enough information to answer that. "
    "Check the documentation or contact support.\"",
]

DATABASES: List[DatabaseConfig] = [
    DatabaseConfig(
        id="netlifyDocs",
        name="Netlify docs",
        database_url="https://netlify-docs-4qbksj.us-east-1.xata.sh/db/docs",
        lookup_table="docs",
        options=AskOptions(
            rules=NETLIFY_RULES,
            search_type="keyword",
            search=SearchOptions(fuzziness=1, prefix="phrase"),
        ),
    ),
]


def get_databases() -> List[DatabaseConfig]:
    return list(DATABASES)


def get_database(database_id: str) -> Optional[DatabaseConfig]:
    """Look up a configured database by its selector id."""
    return next((db for db in DATABASES if db.id == database_id), None)
