"""Combining and dividing document content."""

from services.repository.DocumentLoader import DocumentLoader
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container
from shared.clients.dms.models.Document import DocumentBase, DocumentDetails
from shared.clients.dms.models.Link import REL_CONTENT_DIVIDE
from shared.clients.dms.models.Merge import MergeOperation
from shared.clients.dms.models.Query import QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import RequestRejectedError, SplitArityError, TransferError
from shared.helper.HelperConfig import HelperConfig

# the service accepts lists, but only splitting into two parts is implemented there
MAX_SPLIT_BOUNDARIES = 1


class MergeSplitEngine:
    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface, document_loader: DocumentLoader) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._document_loader = document_loader

    def staple(self, session: PlatformSession, document_ids: list[int], container: Container) -> DocumentDetails:
        """Staple the documents into a single document.

        Returns:
            DocumentDetails: The stapled document.
        """
        return self._merge(session, document_ids, container, MergeOperation.STAPLE)

    def clip(self, session: PlatformSession, document_ids: list[int], container: Container) -> DocumentDetails:
        """Clip the documents into a single document.

        Returns:
            DocumentDetails: The clipped document.
        """
        return self._merge(session, document_ids, container, MergeOperation.CLIP)

    def split(self, session: PlatformSession, document: DocumentBase, page_boundaries: list[int], result_names: list[str], container: Container) -> QueryResultPage:
        """Split a document in two parts.

        Args:
            session (PlatformSession): The authenticated session.
            document (DocumentBase): The document to split.
            page_boundaries (list[int]): At most one page; it stays with the first part.
            result_names (list[str]): At most one name, the title of the second part. The first part keeps the original title.
            container (Container): The cabinet or tray holding the document.

        Returns:
            QueryResultPage: The documents created by the split.

        Raises:
            SplitArityError: If more than one boundary or name is given. Nothing is sent in that case.
            TransferError: If the service rejects the split.
        """
        if len(page_boundaries) > MAX_SPLIT_BOUNDARIES or len(result_names) > MAX_SPLIT_BOUNDARIES:
            raise SplitArityError(
                f"Only two-part splits are supported: got {len(page_boundaries)} page boundaries and {len(result_names)} result names."
            )

        document = self._document_loader.ensure_fully_loaded(session, document, container, required_rel=REL_CONTENT_DIVIDE)
        try:
            result = self._dms_client.do_divide_content(session, document, container, page_boundaries, result_names)
        except RequestRejectedError as e:
            raise TransferError(f"Could not split document {document.id} in '{container.name}': {e.server_message or e}") from e

        self.logging.info("Split document %d in '%s' into %d documents", document.id, container.name, len(result.items))
        return result

    def _merge(self, session: PlatformSession, document_ids: list[int], container: Container, operation: MergeOperation) -> DocumentDetails:
        try:
            merged = self._dms_client.do_merge_content(session, container, document_ids, operation)
        except RequestRejectedError as e:
            raise TransferError(
                f"Could not {operation.value.lower()} documents {document_ids} in '{container.name}': {e.server_message or e}"
            ) from e

        self.logging.info("%s %d documents in '%s' into document %d", operation.value, len(document_ids), container.name, merged.id)
        return merged
