"""Database catalog models."""
from pydantic import BaseModel


class DatabaseSummary(BaseModel):
    """A selectable database and how many records it holds."""
    id: str
    name: str
    record_count: int
