"""Moving documents between cabinets and trays.

Every transfer invalidates the document object the caller passed in. Only
the documents of the returned QueryResultPage are valid afterwards.
"""

from services.repository.DocumentLoader import DocumentLoader
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Document import DOCUMENT_NAME_FIELD, DocumentBase, DocumentDetails, IndexField
from shared.clients.dms.models.Query import QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import ContainerKindError, RequestRejectedError, TransferError
from shared.helper.HelperConfig import HelperConfig


def _require_kind(container: Container, kind: ContainerKind, role: str) -> None:
    if container.kind is not kind:
        raise ContainerKindError(
            f"The {role} '{container.name}' is a {container.kind.value.lower()}, expected a {kind.value.lower()}."
        )


class TransferEngine:
    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface, document_loader: DocumentLoader) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._document_loader = document_loader

    ##########################################
    ########## CABINET -> TRAY ###############
    ##########################################

    def move_dropping_fields(self, session: PlatformSession, document: DocumentBase, source: Container, destination_tray: Container) -> QueryResultPage:
        """Move a document into a tray, keeping only its title.

        All other index values are lost. The title travels in the reserved
        document name field.

        Returns:
            QueryResultPage: The tray's view of the moved document.

        Raises:
            ContainerKindError: If the destination is not a tray.
            TransferError: If the service rejects the transfer.
        """
        _require_kind(destination_tray, ContainerKind.TRAY, "destination")
        document = self._document_loader.ensure_fully_loaded(session, document, source)

        title_only = DocumentDetails(
            engine=document.engine,
            id=document.id,
            fields=[IndexField(name=DOCUMENT_NAME_FIELD, value=document.title)],
        )
        return self._transfer(
            "move without fields", document.id, source, destination_tray,
            lambda: self._dms_client.do_transfer_documents(session, destination_tray, source, [title_only], keep_source=False),
        )

    def move_full(self, session: PlatformSession, document: DocumentBase, source: Container, destination_tray: Container) -> QueryResultPage:
        """Move a document into a tray. The service carries all index values over.

        Raises:
            ContainerKindError: If the destination is not a tray.
            TransferError: If the service rejects the transfer.
        """
        _require_kind(destination_tray, ContainerKind.TRAY, "destination")
        return self._transfer(
            "move", document.id, source, destination_tray,
            lambda: self._dms_client.do_transfer_by_ids(session, destination_tray, source, [document.id], keep_source=False),
        )

    ##########################################
    ########## TRAY -> CABINET ###############
    ##########################################

    def store_with_values(self, session: PlatformSession, document: DocumentBase, source_tray: Container, destination_cabinet: Container, index_values: list[IndexField], keep_in_source: bool = False) -> QueryResultPage:
        """Store a document from a tray into a cabinet, applying the given index values.

        Args:
            session (PlatformSession): The authenticated session.
            document (DocumentBase): The document to store.
            source_tray (Container): The tray the document is in.
            destination_cabinet (Container): The cabinet to store into.
            index_values (list[IndexField]): The fields the stored document gets.
            keep_in_source (bool): If True the document stays addressable in the tray as well.

        Raises:
            ContainerKindError: If source or destination has the wrong kind.
            TransferError: If the service rejects the transfer.
        """
        _require_kind(source_tray, ContainerKind.TRAY, "source")
        _require_kind(destination_cabinet, ContainerKind.CABINET, "destination")

        with_values = DocumentDetails(engine=document.engine, id=document.id, fields=list(index_values))
        return self._transfer(
            "store", document.id, source_tray, destination_cabinet,
            lambda: self._dms_client.do_transfer_documents(session, destination_cabinet, source_tray, [with_values], keep_source=keep_in_source),
        )

    def store_with_auto_hints(self, session: PlatformSession, document: DocumentBase, source_tray: Container, destination_cabinet: Container) -> QueryResultPage:
        """Store a document from a tray into a cabinet, letting the service fill the index
        values from its content recognition hints. The tray copy is always removed.

        Raises:
            ContainerKindError: If source or destination has the wrong kind.
            TransferError: If the service rejects the transfer.
        """
        _require_kind(source_tray, ContainerKind.TRAY, "source")
        _require_kind(destination_cabinet, ContainerKind.CABINET, "destination")
        return self._transfer(
            "store with hints", document.id, source_tray, destination_cabinet,
            lambda: self._dms_client.do_transfer_by_ids(session, destination_cabinet, source_tray, [document.id], keep_source=False, fill_intellix=True),
        )

    def _transfer(self, action: str, document_id: int, source: Container, destination: Container, request) -> QueryResultPage:
        try:
            result = request()
        except RequestRejectedError as e:
            raise TransferError(
                f"Could not {action} document {document_id} from '{source.name}' to '{destination.name}': {e.server_message or e}"
            ) from e
        self.logging.info("%s document %d: '%s' -> '%s'", action.capitalize(), document_id, source.name, destination.name)
        return result
