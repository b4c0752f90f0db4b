"""Per-document outcome of a batch index field update."""

from pydantic import BaseModel

from shared.clients.dms.models.Document import DocumentDetails


class BatchUpdateResultItem(BaseModel):
    """
    One targeted document of a batch update. A missing error message means the update was applied;
    otherwise the document was left entirely unchanged.
    """
    document: DocumentDetails | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error_message is None
