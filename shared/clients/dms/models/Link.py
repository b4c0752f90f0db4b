"""Hypermedia links carried by every platform resource."""

from pydantic import BaseModel


class Link(BaseModel):
    """
    A single relation of a resource, e.g. rel="transfer" pointing to the transfer endpoint of a cabinet.
    """
    rel: str
    href: str


class LinkedModel(BaseModel):
    """
    Base for resources that expose relations to follow-up requests.
    """
    links: list[Link] = []

    def get_link(self, rel: str) -> str | None:
        """
        Returns the href of the relation with the given name (case-insensitive), or None if the resource does not expose it.
        """
        wanted = rel.lower()
        for link in self.links:
            if link.rel.lower() == wanted:
                return link.href
        return None

    def has_link(self, rel: str) -> bool:
        return self.get_link(rel) is not None


# relation names of the platform's hypermedia vocabulary
REL_SELF = "self"
REL_FILE_CABINETS = "filecabinets"
REL_LOGIN_TOKEN = "loginToken"
REL_SEARCHES = "searches"
REL_STORES = "stores"
REL_DOCUMENTS = "documents"
REL_DIALOG_EXPRESSION = "dialogExpression"
REL_COUNT = "count"
REL_TRANSFER = "transfer"
REL_CONTENT_MERGE = "contentMergeOperation"
REL_CONTENT_DIVIDE = "contentDivideOperation"
REL_BATCH_UPDATE = "batchUpdate"
REL_FIELDS = "fields"
