from abc import abstractmethod
from datetime import timedelta

import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.ClientInterface import ClientInterface
from shared.clients.dms.models.BatchUpdate import BatchUpdateResultItem
from shared.clients.dms.models.Container import Container
from shared.clients.dms.models.Dialog import Dialog, DialogInfo, DialogKind
from shared.clients.dms.models.Document import DocumentBase, DocumentDetails, IndexField
from shared.clients.dms.models.Link import (
    LinkedModel,
    REL_BATCH_UPDATE,
    REL_CONTENT_DIVIDE,
    REL_CONTENT_MERGE,
    REL_COUNT,
    REL_DIALOG_EXPRESSION,
    REL_DOCUMENTS,
    REL_FIELDS,
    REL_FILE_CABINETS,
    REL_LOGIN_TOKEN,
    REL_SEARCHES,
    REL_SELF,
    REL_STORES,
    REL_TRANSFER,
)
from shared.clients.dms.models.Merge import MergeOperation
from shared.clients.dms.models.Organization import Organization
from shared.clients.dms.models.Query import QueryExpression, QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import TransportError


class DMSClientInterface(ClientInterface):
    """
    Repository connector: owns logon, logoff, tokens and the raw requests against the document repository.

    Requests follow the hypermedia relations of the resources they start from and fall back to the
    engine's well-known endpoints when a resource does not carry the relation.
    """

    def __init__(self, helper_config: HelperConfig, transport: httpx.BaseTransport | None = None):
        super().__init__(helper_config=helper_config, transport=transport)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "dms"
        """
        return "dms"

    def _relation_or(self, resource: LinkedModel, rel: str, fallback: str) -> str:
        """
        Returns the href of a relation of the resource, or the fallback endpoint if the relation is missing.
        """
        href = resource.get_link(rel)
        if href is None:
            self.logging.debug("Relation '%s' missing on %s, using endpoint %s", rel, type(resource).__name__, fallback)
            return fallback
        return href

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_logon(self) -> str:
        """
        Returns the endpoint path for credential logon requests.

        Returns:
            str: The endpoint path (e.g. "/DocuWare/Platform/Account/Logon")
        """
        pass

    @abstractmethod
    def _get_endpoint_token_logon(self) -> str:
        """
        Returns the endpoint path for token logon requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_logoff(self) -> str:
        """
        Returns the endpoint path for logoff requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_organizations(self) -> str:
        """
        Returns the endpoint path listing the organizations of the logged on user.
        """
        pass

    @abstractmethod
    def _get_endpoint_login_token(self) -> str:
        """
        Returns the endpoint path for creating login tokens, used if the organization has no "loginToken" relation.
        """
        pass

    @abstractmethod
    def _get_endpoint_containers(self) -> str:
        """
        Returns the endpoint path listing all cabinets and trays, used if the organization has no "filecabinets" relation.
        """
        pass

    @abstractmethod
    def _get_endpoint_dialogs(self, container_id: str, kind: DialogKind) -> str:
        """
        Returns the endpoint path listing the dialogs of one kind of a container.

        Args:
            container_id (str): The ID of the container.
            kind (DialogKind): Search or store dialogs.
        """
        pass

    @abstractmethod
    def _get_endpoint_dialog(self, container_id: str, dialog_id: str) -> str:
        """
        Returns the endpoint path of a single dialog.
        """
        pass

    @abstractmethod
    def _get_endpoint_dialog_query(self, container_id: str, dialog_id: str) -> str:
        """
        Returns the endpoint path executing a dialog expression query.
        """
        pass

    @abstractmethod
    def _get_endpoint_dialog_count(self, container_id: str, dialog_id: str) -> str:
        """
        Returns the endpoint path executing a count-only query of a dialog.
        """
        pass

    @abstractmethod
    def _get_endpoint_documents(self, container_id: str) -> str:
        """
        Returns the endpoint path listing the documents of a container. Paging is passed as query parameters.
        """
        pass

    @abstractmethod
    def _get_endpoint_document_details(self, container_id: str, document_id: int) -> str:
        """
        Returns the endpoint path of a single document.

        Args:
            container_id (str): The ID of the container holding the document.
            document_id (int): The ID of the document.
        """
        pass

    @abstractmethod
    def _get_endpoint_transfer(self, container_id: str) -> str:
        """
        Returns the endpoint path receiving documents transferred into the container.
        """
        pass

    @abstractmethod
    def _get_endpoint_content_merge(self, container_id: str) -> str:
        """
        Returns the endpoint path merging the content of documents of a container.
        """
        pass

    @abstractmethod
    def _get_endpoint_content_divide(self, container_id: str, document_id: int) -> str:
        """
        Returns the endpoint path dividing the content of a single document.
        """
        pass

    @abstractmethod
    def _get_endpoint_batch_update(self, container_id: str) -> str:
        """
        Returns the endpoint path updating index fields of several documents at once.
        """
        pass

    @abstractmethod
    def _get_endpoint_document_fields(self, container_id: str, document_id: int) -> str:
        """
        Returns the endpoint path of the index fields of a single document.
        """
        pass

    ##########################################
    ############ REQUEST BUILDER #############
    ##########################################

    @abstractmethod
    def _build_logon_form(self, organization_name: str, user_name: str, password: str) -> dict:
        """
        Builds the form body of a credential logon.
        """
        pass

    @abstractmethod
    def _build_token_logon(self, token: str) -> dict:
        """
        Builds the body of a token logon.
        """
        pass

    @abstractmethod
    def _build_token_description(self, lifetime: timedelta) -> dict:
        """
        Builds the body requesting a multi-use login token valid for the given lifetime.
        """
        pass

    @abstractmethod
    def _build_dialog_expression(self, expression: QueryExpression | None) -> dict:
        """
        Encodes search criteria. None encodes a query without conditions.
        """
        pass

    @abstractmethod
    def _build_documents_transfer(self, source: Container, documents: list[DocumentDetails], keep_source: bool) -> dict:
        """
        Builds a transfer request that carries the documents (id and index fields) to apply at the destination.

        Args:
            source (Container): The container the documents are currently stored in.
            documents (list[DocumentDetails]): The documents with the fields they should have after the transfer.
            keep_source (bool): If True the documents remain in the source container.
        """
        pass

    @abstractmethod
    def _build_cabinet_transfer(self, source: Container, document_ids: list[int], keep_source: bool, fill_intellix: bool) -> dict:
        """
        Builds a transfer request keyed by document ids. Index fields are preserved by the server,
        or recognised from the content if fill_intellix is set.
        """
        pass

    @abstractmethod
    def _get_transfer_headers(self, by_document_ids: bool) -> dict:
        """
        Returns the headers distinguishing the two transfer request flavours.
        """
        pass

    @abstractmethod
    def _build_content_merge(self, document_ids: list[int], operation: MergeOperation) -> dict:
        pass

    @abstractmethod
    def _build_content_divide(self, page_boundaries: list[int], result_names: list[str]) -> dict:
        pass

    @abstractmethod
    def _build_batch_update(self, document_ids: list[int], store_dialog: Dialog, fields: list[IndexField]) -> dict:
        """
        Builds a batch update that processes every document even if earlier ones fail.
        """
        pass

    @abstractmethod
    def _build_index_fields(self, fields: list[IndexField]) -> dict:
        pass

    ##########################################
    ################ SESSION #################
    ##########################################

    def load_cookies(self) -> httpx.Cookies:
        """
        Returns persisted cookies to start a new session with. Override to re-use a previous logon.

        Returns:
            httpx.Cookies: An empty cookie jar unless overridden.
        """
        return httpx.Cookies()

    def save_cookies(self, cookies: httpx.Cookies) -> None:
        """
        Persists the cookies of a freshly authenticated session. Does nothing unless overridden.
        """
        return None

    def connect(self, server_url: str, organization_name: str, user_name: str, password: str) -> PlatformSession:
        """
        Logs on with user credentials and binds the session to the first organization of the user.

        Note that a logon potentially consumes a license on the server.

        Args:
            server_url (str): The URL of the server the platform is running on (e.g. "https://dms.example.com").
            organization_name (str): The organization to connect to.
            user_name (str): The user to log on with.
            password (str): The password of the user.

        Returns:
            PlatformSession: The authenticated session.

        Raises:
            TransportError: If the server is unreachable or refuses the credentials.
        """
        form = self._build_logon_form(organization_name, user_name, password)
        return self._open_session(server_url, endpoint=self._get_endpoint_logon(), data=form)

    def connect_with_token(self, server_url: str, token: str) -> PlatformSession:
        """
        Logs on with a token created by request_multi_use_token() or a single-use token.

        Raises:
            TransportError: If the server is unreachable or refuses the token.
        """
        return self._open_session(server_url, endpoint=self._get_endpoint_token_logon(), json=self._build_token_logon(token))

    def connect_from_config(self) -> PlatformSession:
        """
        Logs on using the engine's configuration. A configured token takes precedence over credentials.

        Raises:
            ValueError: If the base URL or the credentials are not configured.
        """
        server_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        token = self.get_config_val("TOKEN", default="", val_type="string")
        if token:
            return self.connect_with_token(server_url, token)
        return self.connect(
            server_url,
            organization_name=self.get_config_val("ORGANIZATION", default=None, val_type="string"),
            user_name=self.get_config_val("USERNAME", default=None, val_type="string"),
            password=self.get_config_val("PASSWORD", default=None, val_type="string"),
        )

    def _open_session(self, server_url: str, endpoint: str, data: dict | None = None, json: dict | None = None) -> PlatformSession:
        http_client = self._create_http_client(cookies=self.load_cookies())
        session = PlatformSession(http_client=http_client, server_url=server_url)
        try:
            self.do_request(session, method="POST", endpoint=endpoint, data=data, json=json)
            self.save_cookies(http_client.cookies)
            session.organization = self.do_fetch_organization(session)
        except Exception:
            http_client.close()
            session.closed = True
            raise
        self.logging.info("Connected to %s at %s (organization '%s')", self._get_engine_name(), session.server_url, session.organization.name)
        return session

    def close(self, session: PlatformSession) -> None:
        """
        Logs off and releases the HTTP client of the session. Calling it twice is harmless.

        The license held by the session is released by the server with a delay, not immediately.
        Logoff is best-effort: a failing logoff request is logged and the session is closed anyway.
        """
        if session.closed:
            return
        try:
            response = self.do_request(session, method="GET", endpoint=self._get_endpoint_logoff(), raise_on_error=False)
            if response.status_code >= 300:
                self.logging.warning("Logoff from %s answered with status %d", session.server_url, response.status_code)
        except TransportError as e:
            self.logging.warning("Logoff from %s failed: %s", session.server_url, e)
        finally:
            session.http_client.close()
            session.closed = True
        self.logging.info("Closed session on %s", session.server_url)

    def request_multi_use_token(self, session: PlatformSession, lifetime: timedelta) -> str:
        """
        Creates a token that logs on as the same user again until the lifetime elapses.
        The token is only valid for this platform service.

        Args:
            session (PlatformSession): The authenticated session.
            lifetime (timedelta): Time span after which the token expires.

        Returns:
            str: The token.
        """
        if lifetime <= timedelta(0):
            raise ValueError("Token lifetime must be positive.")
        organization = session.require_organization()
        endpoint = self._relation_or(organization, REL_LOGIN_TOKEN, self._get_endpoint_login_token())
        resp = self.do_request(session, method="POST", endpoint=endpoint, json=self._build_token_description(lifetime))
        return self._parse_token(resp)

    ##########################################
    ############### REQUESTS #################
    ##########################################

    ############# LISTING REQUESTS ##############
    def do_fetch_organization(self, session: PlatformSession) -> Organization:
        """
        Fetches the organizations of the logged on user and returns the first one.

        Raises:
            TransportError: If the user has no organization.
        """
        resp = self.do_request(session, method="GET", endpoint=self._get_endpoint_organizations())
        organizations = self._parse_organizations(resp.json())
        if not organizations:
            raise TransportError(f"No organization available for this logon on {session.server_url}")
        return organizations[0]

    def do_fetch_containers(self, session: PlatformSession) -> list[Container]:
        """
        Fetches all cabinets and trays the session can access.

        Returns:
            list[Container]: Cabinets and trays in server order.
        """
        organization = session.require_organization()
        endpoint = self._relation_or(organization, REL_FILE_CABINETS, self._get_endpoint_containers())
        resp = self.do_request(session, method="GET", endpoint=endpoint)
        containers = self._parse_containers(resp.json())
        self.logging.debug("Fetched %d containers from %s", len(containers), self._get_engine_name())
        return containers

    def do_fetch_dialog_infos(self, session: PlatformSession, container: Container, kind: DialogKind) -> list[DialogInfo]:
        """
        Fetches the dialogs of one kind of a container.

        Args:
            session (PlatformSession): The authenticated session.
            container (Container): The cabinet or tray.
            kind (DialogKind): Search or store dialogs.

        Returns:
            list[DialogInfo]: The dialogs in server order.
        """
        rel = REL_SEARCHES if kind is DialogKind.SEARCH else REL_STORES
        endpoint = self._relation_or(container, rel, self._get_endpoint_dialogs(container.id, kind))
        resp = self.do_request(session, method="GET", endpoint=endpoint)
        return self._parse_dialog_infos(resp.json(), kind)

    ############# GET REQUESTS ##############
    def do_fetch_dialog(self, session: PlatformSession, container: Container, dialog_info: DialogInfo) -> Dialog:
        """
        Resolves a dialog info into the full dialog by following its "self" relation.
        """
        endpoint = self._relation_or(dialog_info, REL_SELF, self._get_endpoint_dialog(container.id, dialog_info.id))
        resp = self.do_request(session, method="GET", endpoint=endpoint)
        return self._parse_dialog(resp.json(), container_id=container.id)

    def do_fetch_count(self, session: PlatformSession, dialog: Dialog) -> int:
        """
        Runs a count-only query of the dialog. No document is transferred.

        Returns:
            int: The total amount of matching documents.
        """
        endpoint = self._relation_or(dialog, REL_COUNT, self._get_endpoint_dialog_count(dialog.container_id, dialog.id))
        resp = self.do_request(session, method="GET", endpoint=endpoint)
        return self._parse_count(resp.json())

    def do_fetch_documents(self, session: PlatformSession, container: Container, start: int = 0, count: int = 100) -> QueryResultPage:
        """
        Fetches one page of the documents of a container, without search criteria.

        Args:
            start (int): Amount of documents to skip.
            count (int): Maximum amount of documents in the page. The server may return fewer.
        """
        endpoint = self._relation_or(container, REL_DOCUMENTS, self._get_endpoint_documents(container.id))
        resp = self.do_request(session, method="GET", endpoint=endpoint, params={"start": start, "count": count})
        return self._parse_query_result(resp.json(), start=start, page_size=count)

    def do_run_query(self, session: PlatformSession, dialog: Dialog, expression: QueryExpression | None, start: int = 0, count: int | None = None) -> QueryResultPage:
        """
        Executes a dialog expression query.

        Args:
            dialog (Dialog): A resolved search dialog.
            expression (QueryExpression | None): The search criteria, None matches everything.
            start (int): Amount of documents to skip.
            count (int | None): Maximum amount of documents in the page, None leaves it to the server.
        """
        endpoint = self._relation_or(dialog, REL_DIALOG_EXPRESSION, self._get_endpoint_dialog_query(dialog.container_id, dialog.id))
        params: dict = {"start": start}
        if count is not None:
            params["count"] = count
        resp = self.do_request(session, method="POST", endpoint=endpoint, params=params, json=self._build_dialog_expression(expression))
        return self._parse_query_result(resp.json(), start=start, page_size=count)

    def do_fetch_document_details(self, session: PlatformSession, document: DocumentBase, container_id: str | None = None) -> DocumentDetails:
        """
        Fetches a document, via its "self" relation if present.

        Args:
            document (DocumentBase): The document reference to reload.
            container_id (str | None): The container of the document, needed if the reference has neither a self relation nor a container id.

        Raises:
            ValueError: If the document cannot be located.
        """
        fallback_container = container_id or document.container_id
        endpoint = document.get_link(REL_SELF)
        if endpoint is None:
            if fallback_container is None:
                raise ValueError(f"Cannot locate document {document.id}: no self relation and no container.")
            endpoint = self._get_endpoint_document_details(fallback_container, document.id)
        resp = self.do_request(session, method="GET", endpoint=endpoint)
        return self._parse_document(resp.json())

    ############# MUTATING REQUESTS ##############
    def do_transfer_documents(self, session: PlatformSession, destination: Container, source: Container, documents: list[DocumentDetails], keep_source: bool = False) -> QueryResultPage:
        """
        Transfers documents into the destination applying the index fields carried by each document.

        Returns:
            QueryResultPage: The destination's view of the transferred documents.
        """
        endpoint = self._relation_or(destination, REL_TRANSFER, self._get_endpoint_transfer(destination.id))
        resp = self.do_request(
            session,
            method="POST",
            endpoint=endpoint,
            json=self._build_documents_transfer(source, documents, keep_source),
            additional_headers=self._get_transfer_headers(by_document_ids=False),
        )
        return self._parse_query_result(resp.json())

    def do_transfer_by_ids(self, session: PlatformSession, destination: Container, source: Container, document_ids: list[int], keep_source: bool = False, fill_intellix: bool = False) -> QueryResultPage:
        """
        Transfers documents into the destination by id. The server keeps their index fields,
        or fills them from content recognition hints if fill_intellix is set.

        Returns:
            QueryResultPage: The destination's view of the transferred documents.
        """
        endpoint = self._relation_or(destination, REL_TRANSFER, self._get_endpoint_transfer(destination.id))
        resp = self.do_request(
            session,
            method="POST",
            endpoint=endpoint,
            json=self._build_cabinet_transfer(source, document_ids, keep_source, fill_intellix),
            additional_headers=self._get_transfer_headers(by_document_ids=True),
        )
        return self._parse_query_result(resp.json())

    def do_merge_content(self, session: PlatformSession, container: Container, document_ids: list[int], operation: MergeOperation) -> DocumentDetails:
        """
        Merges the content of the documents into a single document, forced even across incompatible formats.
        """
        endpoint = self._relation_or(container, REL_CONTENT_MERGE, self._get_endpoint_content_merge(container.id))
        resp = self.do_request(session, method="PUT", endpoint=endpoint, json=self._build_content_merge(document_ids, operation))
        return self._parse_document(resp.json())

    def do_divide_content(self, session: PlatformSession, document: DocumentDetails, container: Container, page_boundaries: list[int], result_names: list[str]) -> QueryResultPage:
        """
        Divides the content of a document at the given pages.

        Returns:
            QueryResultPage: The documents resulting from the split.
        """
        endpoint = self._relation_or(document, REL_CONTENT_DIVIDE, self._get_endpoint_content_divide(container.id, document.id))
        resp = self.do_request(session, method="PUT", endpoint=endpoint, json=self._build_content_divide(page_boundaries, result_names))
        return self._parse_query_result(resp.json())

    def do_batch_update_fields(self, session: PlatformSession, query_result: QueryResultPage, container: Container, store_dialog: Dialog, fields: list[IndexField]) -> list[BatchUpdateResultItem]:
        """
        Applies the index fields to every document of the query result in one request.

        Returns:
            list[BatchUpdateResultItem]: One item per document, carrying an error message if that document was rejected.
        """
        endpoint = self._relation_or(query_result, REL_BATCH_UPDATE, self._get_endpoint_batch_update(container.id))
        body = self._build_batch_update(query_result.document_ids(), store_dialog, fields)
        resp = self.do_request(session, method="POST", endpoint=endpoint, json=body)
        return self._parse_batch_update_result(resp.json())

    def do_update_document_fields(self, session: PlatformSession, document: DocumentDetails, container: Container, fields: list[IndexField]) -> list[IndexField]:
        """
        Replaces index values of a single document.

        Returns:
            list[IndexField]: The document's index fields after the update.
        """
        endpoint = self._relation_or(document, REL_FIELDS, self._get_endpoint_document_fields(container.id, document.id))
        resp = self.do_request(session, method="PUT", endpoint=endpoint, json=self._build_index_fields(fields))
        return self._parse_index_fields(resp.json())

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    ############### LIST RESPONSES ###############
    @abstractmethod
    def _parse_organizations(self, response: dict) -> list[Organization]:
        """
        Parses the organization listing.

        Args:
            response (dict): The raw response from the organizations endpoint.
        Returns:
            list[Organization]: The organizations of the logged on user.
        """
        pass

    @abstractmethod
    def _parse_containers(self, response: dict) -> list[Container]:
        """
        Parses the cabinet listing into containers, tagging each as cabinet or tray.

        Args:
            response (dict): The raw response from the cabinets endpoint.
        Returns:
            list[Container]: All containers in server order.
        """
        pass

    @abstractmethod
    def _parse_dialog_infos(self, response: dict, kind: DialogKind) -> list[DialogInfo]:
        """
        Parses a dialog listing.

        Args:
            response (dict): The raw response from the dialogs endpoint.
            kind (DialogKind): The kind that was requested.
        Returns:
            list[DialogInfo]: The dialogs in server order.
        """
        pass

    @abstractmethod
    def _parse_query_result(self, response: dict, start: int = 0, page_size: int | None = None) -> QueryResultPage:
        """
        Parses a documents query result.

        Args:
            response (dict): The raw query result.
            start (int): The offset that was requested.
            page_size (int | None): The page size that was requested.
        Returns:
            QueryResultPage: The parsed page including the total count reported by the server.
        """
        pass

    @abstractmethod
    def _parse_batch_update_result(self, response: dict) -> list[BatchUpdateResultItem]:
        pass

    ############ GET RESPONSES ##############
    @abstractmethod
    def _parse_dialog(self, response: dict, container_id: str) -> Dialog:
        """
        Parses a raw dialog into a Dialog object.

        Raises:
            Exception: If required fields are missing or the data format is invalid.
        """
        pass

    @abstractmethod
    def _parse_count(self, response: dict) -> int:
        """
        Extracts the total of a count-only query.
        """
        pass

    @abstractmethod
    def _parse_document(self, response: dict) -> DocumentDetails:
        """
        Parses a raw document into a DocumentDetails object.

        Raises:
            Exception: If required fields are missing or the data format is invalid.
        """
        pass

    @abstractmethod
    def _parse_index_fields(self, response: dict) -> list[IndexField]:
        pass

    @abstractmethod
    def _parse_token(self, response: httpx.Response) -> str:
        """
        Extracts the token from a login token response.
        """
        pass
