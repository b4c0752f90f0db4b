"""Precondition step that turns document references into fully loaded documents."""

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container
from shared.clients.dms.models.Document import DocumentBase, DocumentDetails
from shared.clients.dms.models.Session import PlatformSession
from shared.helper.HelperConfig import HelperConfig


class DocumentLoader:
    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client

    def ensure_fully_loaded(self, session: PlatformSession, document: DocumentBase, container: Container, required_rel: str | None = None) -> DocumentDetails:
        """Return a fully loaded document, re-fetching it if needed.

        A document is reused as is when it already carries its details and, if
        required_rel is given, that relation. Otherwise it is fetched again and
        the fresh copy is returned; the passed object is not modified.

        Args:
            session (PlatformSession): The authenticated session.
            document (DocumentBase): The document or bare reference.
            container (Container): The container holding the document.
            required_rel (str | None): A relation the caller is about to follow.

        Returns:
            DocumentDetails: The loaded document.
        """
        if isinstance(document, DocumentDetails) and (required_rel is None or document.has_link(required_rel)):
            return document

        self.logging.debug("Reloading document %s from %s '%s'", document.id, container.kind.value.lower(), container.name)
        return self._dms_client.do_fetch_document_details(session, document, container_id=container.id)
