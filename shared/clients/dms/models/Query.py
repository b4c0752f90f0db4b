"""Query expressions and result pages."""

from enum import Enum

from pydantic import BaseModel

from shared.clients.dms.models.Document import DocumentDetails
from shared.clients.dms.models.Link import LinkedModel


class QueryOperation(str, Enum):
    AND = "And"
    OR = "Or"


class QueryCondition(BaseModel):
    """
    Matches documents whose field (database name) equals one of the given values.
    """
    field_name: str
    values: list[str]


class QueryExpression(BaseModel):
    """
    Search criteria of a dialog query. Encoded on the wire by the DMS client.
    """
    operation: QueryOperation = QueryOperation.AND
    conditions: list[QueryCondition] = []


class QueryResultPage(LinkedModel):
    """
    One page of a documents query. The server may return fewer items than requested even when more remain,
    so the end of the result set is decided by total_count, not by the page length.
    """
    items: list[DocumentDetails] = []
    total_count: int = 0
    start_offset: int = 0
    page_size: int | None = None
    has_more: bool = False

    def document_ids(self) -> list[int]:
        return [item.id for item in self.items]
