"""Document reference request/response models."""
from pydantic import BaseModel, TypeAdapter


class DocsGetRequest(BaseModel):
    """Request model for resolving record ids into display metadata."""
    database: str
    ids: list[str]


class DocumentReference(BaseModel):
    """A source document the answer was grounded on."""
    id: str
    title: str
    slug: str

    @property
    def url(self) -> str:
        return f"https://{self.slug}"


DocumentReferenceList = TypeAdapter(list[DocumentReference])
