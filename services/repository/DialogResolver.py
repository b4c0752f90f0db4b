"""Selection of the default search and store dialog of a container."""

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Dialog import Dialog, DialogInfo, DialogKind
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import DialogConfigurationError
from shared.helper.HelperConfig import HelperConfig


def _wanted_default_flag(container: Container) -> bool:
    """Return the IsDefault value that marks the default dialog of a container.

    Cabinets mark it with True, trays with False. This is how the remote
    service configures dialogs and must be kept as is.
    """
    if container.kind is ContainerKind.CABINET:
        return True
    elif container.kind is ContainerKind.TRAY:
        return False
    raise ValueError(f"Unknown container kind: {container.kind}")


def select_default_dialog(container: Container, dialog_infos: list[DialogInfo]) -> DialogInfo | None:
    """Pick the first dialog whose IsDefault flag matches the container's convention, or None."""
    wanted = _wanted_default_flag(container)
    return next((info for info in dialog_infos if info.is_default == wanted), None)


class DialogResolver:
    """Resolves the default dialogs of a container into full dialogs."""

    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client

    def default_search_dialog(self, session: PlatformSession, container: Container) -> Dialog | None:
        return self._default_dialog(session, container, DialogKind.SEARCH)

    def default_store_dialog(self, session: PlatformSession, container: Container) -> Dialog | None:
        return self._default_dialog(session, container, DialogKind.STORE)

    def require_search_dialog(self, session: PlatformSession, container: Container) -> Dialog:
        """Like default_search_dialog(), but a missing dialog raises DialogConfigurationError."""
        return self._require(container, DialogKind.SEARCH, self.default_search_dialog(session, container))

    def require_store_dialog(self, session: PlatformSession, container: Container) -> Dialog:
        """Like default_store_dialog(), but a missing dialog raises DialogConfigurationError."""
        return self._require(container, DialogKind.STORE, self.default_store_dialog(session, container))

    def _default_dialog(self, session: PlatformSession, container: Container, kind: DialogKind) -> Dialog | None:
        infos = self._dms_client.do_fetch_dialog_infos(session, container, kind)
        info = select_default_dialog(container, infos)
        if info is None:
            self.logging.warning(
                "%s '%s' has no default %s dialog among %d dialogs",
                container.kind.value, container.name, kind.value.lower(), len(infos),
            )
            return None
        return self._dms_client.do_fetch_dialog(session, container, info)

    def _require(self, container: Container, kind: DialogKind, dialog: Dialog | None) -> Dialog:
        if dialog is None:
            raise DialogConfigurationError(
                f"{container.kind.value} '{container.name}' has no default {kind.value.lower()} dialog configured."
            )
        return dialog
