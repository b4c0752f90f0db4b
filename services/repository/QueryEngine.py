"""Counting, paging and searching the documents of a container."""

from typing import Callable

from services.repository.DialogResolver import DialogResolver
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import Container
from shared.clients.dms.models.Dialog import Dialog
from shared.clients.dms.models.Document import DocumentDetails
from shared.clients.dms.models.Query import QueryExpression, QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.helper.HelperConfig import HelperConfig

# page size requested when collecting a complete result; the server caps it on its own
UNBOUNDED_PAGE_SIZE = 2**31 - 1
DEFAULT_PAGE_SIZE = 100


class QueryEngine:
    """Executes count, paged and complete queries against a container."""

    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface, dialog_resolver: DialogResolver) -> None:
        self.logging = helper_config.get_logger()
        self._dms_client = dms_client
        self._dialog_resolver = dialog_resolver
        self.default_page_size = int(helper_config.get_number_val("QUERY_PAGE_SIZE", default=DEFAULT_PAGE_SIZE))

    def count(self, session: PlatformSession, container: Container) -> int:
        """Return the total amount of documents in the container.

        This is the cheapest way to get the total: only the count is
        transferred, no document.

        Raises:
            DialogConfigurationError: If the container has no default search dialog.
        """
        dialog = self._dialog_resolver.require_search_dialog(session, container)
        total = self._dms_client.do_fetch_count(session, dialog)
        self.logging.debug("%s '%s' holds %d documents", container.kind.value, container.name, total)
        return total

    def page(self, session: PlatformSession, container: Container, expression: QueryExpression | None = None, start: int = 0, page_size: int | None = None) -> QueryResultPage:
        """Return one page of documents.

        The server may return fewer than page_size items even when more
        remain; compare against total_count to detect the end.

        Args:
            session (PlatformSession): The authenticated session.
            container (Container): The cabinet or tray to read.
            expression (QueryExpression | None): Search criteria. Without criteria the container's document list is paged.
            start (int): Amount of documents to skip.
            page_size (int | None): Upper bound of documents returned, defaults to QUERY_PAGE_SIZE.

        Raises:
            ValueError: If start is negative or page_size is not positive.
        """
        page_size = self.default_page_size if page_size is None else page_size
        if start < 0:
            raise ValueError(f"start must not be negative, got {start}")
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        if expression is None:
            return self._dms_client.do_fetch_documents(session, container, start=start, count=page_size)
        dialog = self._dialog_resolver.require_search_dialog(session, container)
        return self.run_query(session, dialog, expression, start=start, count=page_size)

    def all(self, session: PlatformSession, container: Container, expression: QueryExpression | None = None) -> list[DocumentDetails]:
        """Return every matching document, loading page after page from offset 0.

        Everything is kept in memory; for large containers use page() directly.
        """
        if expression is None:
            return self._collect(
                container.name,
                lambda start: self._dms_client.do_fetch_documents(session, container, start=start, count=UNBOUNDED_PAGE_SIZE),
            ).items
        dialog = self._dialog_resolver.require_search_dialog(session, container)
        return self.run_query_complete(session, dialog, expression).items

    def run_query(self, session: PlatformSession, dialog: Dialog, expression: QueryExpression | None, start: int = 0, count: int | None = None) -> QueryResultPage:
        """Execute a search through a resolved dialog. Low-level primitive of page(), all() and batch updates."""
        return self._dms_client.do_run_query(session, dialog, expression, start=start, count=count)

    def run_query_complete(self, session: PlatformSession, dialog: Dialog, expression: QueryExpression | None) -> QueryResultPage:
        """Execute a search through a resolved dialog and gather every match into one result.

        Returns:
            QueryResultPage: All matches from offset 0, carrying the relations of the first page.
        """
        return self._collect(
            dialog.name or dialog.id,
            lambda start: self.run_query(session, dialog, expression, start=start, count=UNBOUNDED_PAGE_SIZE),
        )

    def _collect(self, source: str, fetch_page: Callable[[int], QueryResultPage]) -> QueryResultPage:
        # a short page is not the end, only total_count or an empty page is
        first = fetch_page(0)
        documents = list(first.items)
        total = first.total_count
        while first.items and len(documents) < total:
            result = fetch_page(len(documents))
            self.logging.debug("Fetched %d documents from '%s', total so far: %d of %d", len(result.items), source, len(documents) + len(result.items), result.total_count)
            if not result.items:
                break
            documents.extend(result.items)
            total = result.total_count
        return QueryResultPage(items=documents, total_count=total, start_offset=0, page_size=None, has_more=False, links=first.links)
