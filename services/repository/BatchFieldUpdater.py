"""Index field updates across a query result, with per-document outcomes."""

from services.repository.DialogResolver import DialogResolver
from services.repository.DocumentLoader import DocumentLoader
from services.repository.QueryEngine import QueryEngine
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.BatchUpdate import BatchUpdateResultItem
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Document import DocumentBase, IndexField
from shared.clients.dms.models.Link import REL_FIELDS
from shared.clients.dms.models.Query import QueryExpression
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import ContainerKindError, RequestRejectedError, ValidationError
from shared.helper.HelperConfig import HelperConfig


class BatchFieldUpdater:
    def __init__(
        self,
        helper_config: HelperConfig,
        dms_client: DMSClientInterface,
        dialog_resolver: DialogResolver,
        query_engine: QueryEngine,
        document_loader: DocumentLoader,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._dialog_resolver = dialog_resolver
        self._query_engine = query_engine
        self._document_loader = document_loader

    def update_fields(self, session: PlatformSession, cabinet: Container, expression: QueryExpression | None, index_values: list[IndexField]) -> list[BatchUpdateResultItem]:
        """Apply index values to every document of a cabinet matching the expression.

        All matches, gathered across every result page, are sent in one batch that keeps going past failures.
        Each document is updated completely or left unchanged; check the
        error_message of every returned item. Rejections of single documents
        are never raised.

        Args:
            session (PlatformSession): The authenticated session.
            cabinet (Container): The cabinet to search in.
            expression (QueryExpression | None): Selects the documents to update.
            index_values (list[IndexField]): The values to set.

        Returns:
            list[BatchUpdateResultItem]: One item per targeted document, holding the updated document.

        Raises:
            ContainerKindError: If the container is not a cabinet.
            DialogConfigurationError: If the cabinet lacks a default search or store dialog.
        """
        if cabinet.kind is not ContainerKind.CABINET:
            raise ContainerKindError(f"Batch updates need a cabinet, '{cabinet.name}' is a {cabinet.kind.value.lower()}.")

        search_dialog = self._dialog_resolver.require_search_dialog(session, cabinet)
        store_dialog = self._dialog_resolver.require_store_dialog(session, cabinet)

        targets = self._query_engine.run_query_complete(session, search_dialog, expression)
        if not targets.items:
            self.logging.info("No documents in '%s' match, nothing to update", cabinet.name)
            return []

        results = self._dms_client.do_batch_update_fields(session, targets, cabinet, store_dialog, index_values)

        failed = [item for item in results if not item.succeeded]
        self.logging.info("Batch update in '%s': %d updated, %d rejected", cabinet.name, len(results) - len(failed), len(failed))
        for item in failed:
            self.logging.warning("Document %s rejected: %s", item.document.id if item.document else "?", item.error_message)
        return results

    def update_document_fields(self, session: PlatformSession, document: DocumentBase, container: Container, index_values: list[IndexField]) -> list[IndexField]:
        """Change index values of a single document.

        Returns:
            list[IndexField]: The document's index fields after the change.

        Raises:
            ValidationError: If the service rejects one of the values. The document is left unchanged.
        """
        document = self._document_loader.ensure_fully_loaded(session, document, container, required_rel=REL_FIELDS)
        try:
            return self._dms_client.do_update_document_fields(session, document, container, index_values)
        except RequestRejectedError as e:
            raise ValidationError(f"Index values of document {document.id} were rejected: {e.server_message or e}") from e
