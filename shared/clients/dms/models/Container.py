"""Backend-independent container model for cabinets and trays."""

from enum import Enum

from shared.clients.dms.models.Link import LinkedModel


class ContainerKind(str, Enum):
    """
    Cabinets are persistent storage locations, trays ("baskets") are transient holding areas.
    """
    CABINET = "Cabinet"
    TRAY = "Tray"


class Container(LinkedModel):
    """
    Represents a single cabinet or tray as returned by a DMS client.
    """
    engine: str
    id: str
    name: str
    kind: ContainerKind

    @property
    def is_tray(self) -> bool:
        return self.kind is ContainerKind.TRAY
