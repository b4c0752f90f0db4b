"""Enumeration and name resolution of cabinets and trays."""

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import AmbiguousNameError, NotFoundError
from shared.helper.HelperConfig import HelperConfig


class ContainerCatalog:
    """Lists the containers a session can access and resolves them by name."""

    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client

    def list_accessible(self, session: PlatformSession, kind: ContainerKind | None = None) -> list[Container]:
        """Return every container the session can access.

        Args:
            session (PlatformSession): The authenticated session.
            kind (ContainerKind | None): Restrict the result to cabinets or trays.

        Returns:
            list[Container]: The containers in server order.
        """
        containers = self._dms_client.do_fetch_containers(session)
        if kind is None:
            return containers
        return [container for container in containers if container.kind is kind]

    def list_cabinets(self, session: PlatformSession) -> list[Container]:
        return self.list_accessible(session, ContainerKind.CABINET)

    def list_trays(self, session: PlatformSession) -> list[Container]:
        return self.list_accessible(session, ContainerKind.TRAY)

    def resolve_by_name(self, session: PlatformSession, name: str, kind: ContainerKind) -> Container:
        """Find the single container of the given kind whose name matches case-insensitively.

        Args:
            session (PlatformSession): The authenticated session.
            name (str): The container name, e.g. "Invoices".
            kind (ContainerKind): Cabinet or tray.

        Returns:
            Container: The matching container.

        Raises:
            NotFoundError: If no container matches.
            AmbiguousNameError: If more than one container matches.
        """
        if not name or not name.strip():
            raise NotFoundError(f"Empty {kind.value.lower()} name.")

        wanted = name.casefold()
        matches = [
            container
            for container in self.list_accessible(session, kind)
            if container.name.casefold() == wanted
        ]

        if not matches:
            raise NotFoundError(f"No {kind.value.lower()} named '{name}' is accessible.")
        if len(matches) > 1:
            ids = ", ".join(container.id for container in matches)
            raise AmbiguousNameError(f"{len(matches)} {kind.value.lower()}s are named '{name}' ({ids}).")

        self.logging.debug("Resolved %s '%s' to %s", kind.value.lower(), name, matches[0].id)
        return matches[0]
