"""Backend-independent document models."""

from typing import Any

from pydantic import BaseModel

from shared.clients.dms.models.Link import LinkedModel

# reserved index field holding the document name
DOCUMENT_NAME_FIELD = "DWWBDOCNAME"


class IndexField(BaseModel):
    """
    A named metadata value attached to a document. Values are validated by the server only.
    """
    name: str
    value: Any = None
    item_type: str = "String"


class DocumentBase(LinkedModel):
    """
    A reference to a document. Only the id is guaranteed, everything else may need a re-fetch.
    """
    engine: str
    id: int
    container_id: str | None = None


class DocumentDetails(DocumentBase):
    """
    A fully loaded document with its title and ordered index fields, as returned by a DMS client.
    """
    title: str | None = None
    fields: list[IndexField] = []
    content_type: str | None = None
    total_pages: int | None = None

    def get_field(self, name: str) -> IndexField | None:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def populated_fields(self) -> list[IndexField]:
        """
        Returns the fields that carry a value. System fields with empty values are skipped.
        """
        return [field for field in self.fields if field.value not in (None, "")]
