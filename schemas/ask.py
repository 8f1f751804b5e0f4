"""Ask request and stream event models."""
from pydantic import BaseModel, ConfigDict, Field


class AskRequest(BaseModel):
    """Request model for the streaming ask endpoint."""
    question: str = Field(..., min_length=1)
    database: str


class StreamEvent(BaseModel):
    """Payload of one SSE message on the ask stream.

    A non-empty ``records`` list is terminal. Otherwise ``answer`` carries the
    next fragment and ``done`` marks normal completion.
    """
    model_config = ConfigDict(extra="ignore")

    answer: str | None = None
    records: list[str] | None = None
    done: bool | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return bool(self.records)

    def to_sse_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
