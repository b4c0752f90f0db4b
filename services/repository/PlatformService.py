"""Facade wiring the repository engines around a single connector."""

from services.repository.BatchFieldUpdater import BatchFieldUpdater
from services.repository.ContainerCatalog import ContainerCatalog
from services.repository.DialogResolver import DialogResolver
from services.repository.DocumentLoader import DocumentLoader
from services.repository.MergeSplitEngine import MergeSplitEngine
from services.repository.QueryEngine import QueryEngine
from services.repository.TransferEngine import TransferEngine
from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.Container import ContainerKind
from shared.clients.dms.models.Document import DocumentDetails
from shared.clients.dms.models.Query import QueryExpression, QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.helper.HelperConfig import HelperConfig


class PlatformService:
    """Builds every engine once and offers name-based shortcuts on top of them.

    The engines are exposed as attributes (catalog, dialogs, queries,
    transfers, merge_split, batch) for everything the shortcuts do not cover.
    """

    def __init__(self, helper_config: HelperConfig, dms_client: DMSClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self.dms_client = dms_client

        self.catalog = ContainerCatalog(helper_config, dms_client)
        self.dialogs = DialogResolver(helper_config, dms_client)
        self.loader = DocumentLoader(helper_config, dms_client)
        self.queries = QueryEngine(helper_config, dms_client, self.dialogs)
        self.transfers = TransferEngine(helper_config, dms_client, self.loader)
        self.merge_split = MergeSplitEngine(helper_config, dms_client, self.loader)
        self.batch = BatchFieldUpdater(helper_config, dms_client, self.dialogs, self.queries, self.loader)

    ##########################################
    ########### NAME BASED ACCESS ############
    ##########################################

    def get_total_amount_of_documents(self, session: PlatformSession, name: str, kind: ContainerKind) -> int:
        container = self.catalog.resolve_by_name(session, name, kind)
        return self.queries.count(session, container)

    def get_all_documents(self, session: PlatformSession, name: str, kind: ContainerKind) -> list[DocumentDetails]:
        container = self.catalog.resolve_by_name(session, name, kind)
        return self.queries.all(session, container)

    def get_documents_using_paging(self, session: PlatformSession, name: str, kind: ContainerKind, start: int = 0, page_size: int | None = None) -> QueryResultPage:
        container = self.catalog.resolve_by_name(session, name, kind)
        return self.queries.page(session, container, start=start, page_size=page_size)

    def get_documents_by_query(self, session: PlatformSession, name: str, kind: ContainerKind, expression: QueryExpression) -> list[DocumentDetails]:
        """Search a container by name and return all matching documents."""
        container = self.catalog.resolve_by_name(session, name, kind)
        return self.queries.all(session, container, expression)
