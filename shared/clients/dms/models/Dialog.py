"""Search and store dialogs of a container."""

from enum import Enum

from shared.clients.dms.models.Link import LinkedModel


class DialogKind(str, Enum):
    SEARCH = "Search"
    STORE = "Store"


class DialogInfo(LinkedModel):
    """
    Short description of a dialog as listed by the "searches" and "stores" relations of a container.
    """
    id: str
    name: str | None = None
    kind: DialogKind
    is_default: bool = False


class Dialog(DialogInfo):
    """
    A fully resolved dialog, obtained by following the "self" relation of a DialogInfo.
    Its relations lead to the query and count endpoints.
    """
    container_id: str
