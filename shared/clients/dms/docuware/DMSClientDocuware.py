from datetime import timedelta

import httpx

from shared.clients.dms.DMSClientInterface import DMSClientInterface
from shared.clients.dms.models.BatchUpdate import BatchUpdateResultItem
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Dialog import Dialog, DialogInfo, DialogKind
from shared.clients.dms.models.Document import DocumentDetails, IndexField
from shared.clients.dms.models.Link import Link
from shared.clients.dms.models.Merge import MergeOperation
from shared.clients.dms.models.Organization import Organization
from shared.clients.dms.models.Query import QueryExpression, QueryResultPage
from shared.clients.dms.models.Session import PlatformSession
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig

LICENSE_TYPE = "PlatformService"
MEDIA_TYPE_DOCUMENTS_TRANSFER = "application/vnd.docuware.platform.documentstransferinfo+json"
MEDIA_TYPE_CABINET_TRANSFER = "application/vnd.docuware.platform.filecabinettransferinfo+json"


def format_timespan(lifetime: timedelta) -> str:
    """Format a timedelta the way the platform expects time spans: "[d.]hh:mm:ss".

    Args:
        lifetime (timedelta): A non-negative time span. Fractions of a second are dropped.

    Returns:
        str: E.g. "01:30:00" for 90 minutes, "2.00:00:00" for two days.
    """
    total_seconds = int(lifetime.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)
    clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{days}.{clock}" if days else clock


class DMSClientDocuware(DMSClientInterface):
    def __init__(self, helper_config: HelperConfig, transport: httpx.BaseTransport | None = None):
        super().__init__(helper_config=helper_config, transport=transport)
        self._platform_path = "/" + self.get_config_val("PLATFORM_PATH", default="/DocuWare/Platform", val_type="string").strip("/")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "DocuWare"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="PLATFORM_PATH", val_type="string", default="/DocuWare/Platform"),
            EnvConfig(env_key="TOKEN", val_type="string", default=""),
        ]

    ################ AUTH ##################
    def _get_auth_header(self, session: PlatformSession) -> dict:
        # the platform authenticates through the cookies set at logon
        return {}

    ################ ENDPOINTS ##################
    def _path(self, *parts: str) -> str:
        return "/".join([self._platform_path, *parts])

    def _get_endpoint_healthcheck(self) -> str:
        return self._path("Organizations")

    def _get_endpoint_logon(self) -> str:
        return self._path("Account", "Logon")

    def _get_endpoint_token_logon(self) -> str:
        return self._path("Account", "TokenLogOn")

    def _get_endpoint_logoff(self) -> str:
        return self._path("Account", "Logoff")

    def _get_endpoint_organizations(self) -> str:
        return self._path("Organizations")

    def _get_endpoint_login_token(self) -> str:
        return self._path("Organization", "LoginToken")

    def _get_endpoint_containers(self) -> str:
        return self._path("FileCabinets")

    def _get_endpoint_dialogs(self, container_id: str, kind: DialogKind) -> str:
        return self._path("FileCabinets", container_id, f"Dialogs?DialogType={kind.value}")

    def _get_endpoint_dialog(self, container_id: str, dialog_id: str) -> str:
        return self._path("FileCabinets", container_id, "Dialogs", dialog_id)

    def _get_endpoint_dialog_query(self, container_id: str, dialog_id: str) -> str:
        return self._path("FileCabinets", container_id, f"Query/DialogExpression?dialogId={dialog_id}")

    def _get_endpoint_dialog_count(self, container_id: str, dialog_id: str) -> str:
        return self._path("FileCabinets", container_id, f"Query/CountExpression?dialogId={dialog_id}")

    def _get_endpoint_documents(self, container_id: str) -> str:
        return self._path("FileCabinets", container_id, "Documents")

    def _get_endpoint_document_details(self, container_id: str, document_id: int) -> str:
        return self._path("FileCabinets", container_id, "Documents", str(document_id))

    def _get_endpoint_transfer(self, container_id: str) -> str:
        return self._path("FileCabinets", container_id, "Task", "Transfer")

    def _get_endpoint_content_merge(self, container_id: str) -> str:
        return self._path("FileCabinets", container_id, "Operations", "ContentMerge")

    def _get_endpoint_content_divide(self, container_id: str, document_id: int) -> str:
        return self._path("FileCabinets", container_id, f"Operations/ContentDivide?docId={document_id}")

    def _get_endpoint_batch_update(self, container_id: str) -> str:
        return self._path("FileCabinets", container_id, "Operations", "BatchUpdate")

    def _get_endpoint_document_fields(self, container_id: str, document_id: int) -> str:
        return self._path("FileCabinets", container_id, "Documents", str(document_id), "Fields")

    ##########################################
    ############ REQUEST BUILDER #############
    ##########################################

    def _build_logon_form(self, organization_name: str, user_name: str, password: str) -> dict:
        return {
            "UserName": user_name,
            "Password": password,
            "Organization": organization_name,
            "RememberMe": "false",
            "RedirectToMyselfInCaseOfError": "false",
            "LicenseType": LICENSE_TYPE,
        }

    def _build_token_logon(self, token: str) -> dict:
        return {"Token": token, "RememberMe": False, "LicenseType": LICENSE_TYPE}

    def _build_token_description(self, lifetime: timedelta) -> dict:
        return {
            "TargetProducts": [LICENSE_TYPE],
            "Usage": "Multi",
            "Lifetime": format_timespan(lifetime),
        }

    def _build_dialog_expression(self, expression: QueryExpression | None) -> dict:
        if expression is None:
            return {"Operation": "And", "Condition": []}
        return {
            "Operation": expression.operation.value,
            "Condition": [
                {"DBName": condition.field_name, "Value": list(condition.values)}
                for condition in expression.conditions
            ],
        }

    def _build_index_field(self, field: IndexField) -> dict:
        return {"FieldName": field.name, "Item": field.value, "ItemElementName": field.item_type}

    def _build_documents_transfer(self, source: Container, documents: list[DocumentDetails], keep_source: bool) -> dict:
        return {
            "Documents": [
                {"Id": document.id, "Fields": [self._build_index_field(field) for field in document.fields]}
                for document in documents
            ],
            "KeepSource": keep_source,
            "SourceFileCabinetId": source.id,
        }

    def _build_cabinet_transfer(self, source: Container, document_ids: list[int], keep_source: bool, fill_intellix: bool) -> dict:
        return {
            "SourceDocId": list(document_ids),
            "KeepSource": keep_source,
            "SourceFileCabinetId": source.id,
            "FillIntellix": fill_intellix,
        }

    def _get_transfer_headers(self, by_document_ids: bool) -> dict:
        media_type = MEDIA_TYPE_CABINET_TRANSFER if by_document_ids else MEDIA_TYPE_DOCUMENTS_TRANSFER
        return {"Content-Type": media_type}

    def _build_content_merge(self, document_ids: list[int], operation: MergeOperation) -> dict:
        return {"Documents": list(document_ids), "Operation": operation.value, "Force": True}

    def _build_content_divide(self, page_boundaries: list[int], result_names: list[str]) -> dict:
        return {
            "Operation": "Split",
            "Force": True,
            "Pages": list(page_boundaries),
            "ResultNames": list(result_names),
        }

    def _build_batch_update(self, document_ids: list[int], store_dialog: Dialog, fields: list[IndexField]) -> dict:
        return {
            "Source": {"Id": list(document_ids)},
            "BreakOnError": False,
            "StoreDialogId": store_dialog.id,
            "Field": [self._build_index_field(field) for field in fields],
        }

    def _build_index_fields(self, fields: list[IndexField]) -> dict:
        return {"Field": [self._build_index_field(field) for field in fields]}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def _parse_links(self, response: dict) -> list[Link]:
        links = []
        for item in response.get("Links") or []:
            rel = item.get("rel") or item.get("Rel")
            href = item.get("href") or item.get("Href")
            if rel and href:
                links.append(Link(rel=rel, href=href))
        return links

    ############### LIST RESPONSES ###############
    def _parse_organizations(self, response: dict) -> list[Organization]:
        return [
            Organization(
                engine=self._get_engine_name(),
                id=str(item.get("Id")),
                name=item.get("Name") or "",
                links=self._parse_links(item),
            )
            for item in response.get("Organization", [])
        ]

    def _parse_containers(self, response: dict) -> list[Container]:
        containers = []
        for item in response.get("FileCabinet", []):
            containers.append(Container(
                engine=self._get_engine_name(),
                id=str(item.get("Id")),
                name=item.get("Name") or "",
                kind=ContainerKind.TRAY if item.get("IsBasket") else ContainerKind.CABINET,
                links=self._parse_links(item),
            ))
        return containers

    def _parse_dialog_infos(self, response: dict, kind: DialogKind) -> list[DialogInfo]:
        return [
            DialogInfo(
                id=str(item.get("Id")),
                name=item.get("DisplayName"),
                kind=kind,
                is_default=bool(item.get("IsDefault")),
                links=self._parse_links(item),
            )
            for item in response.get("Dialog", [])
        ]

    def _parse_query_result(self, response: dict, start: int = 0, page_size: int | None = None) -> QueryResultPage:
        items = [self._parse_document(item) for item in response.get("Items", [])]

        # "Count" is missing on results of mutating requests, fall back to what was returned
        count = response.get("Count") or {}
        return QueryResultPage(
            items=items,
            total_count=count.get("Value", len(items)),
            start_offset=start,
            page_size=page_size,
            has_more=bool(count.get("HasMore", False)),
            links=self._parse_links(response),
        )

    def _parse_batch_update_result(self, response: dict) -> list[BatchUpdateResultItem]:
        results = []
        for item in response.get("Item", []):
            raw_document = item.get("Document")
            results.append(BatchUpdateResultItem(
                document=self._parse_document(raw_document) if raw_document else None,
                error_message=item.get("ErrorMessage") or None,
            ))
        return results

    ############### GET RESPONSES ###############
    def _parse_dialog(self, response: dict, container_id: str) -> Dialog:
        # query relations are nested in the "Query" part of a dialog
        links = self._parse_links(response) + self._parse_links(response.get("Query") or {})
        return Dialog(
            id=str(response.get("Id")),
            name=response.get("DisplayName"),
            kind=DialogKind(response.get("Type", DialogKind.SEARCH.value)),
            is_default=bool(response.get("IsDefault")),
            container_id=str(response.get("FileCabinetId") or container_id),
            links=links,
        )

    def _parse_count(self, response: dict) -> int:
        groups = response.get("Group") or []
        if not groups:
            return 0
        return int(groups[0].get("Count", 0))

    def _parse_index_field(self, response: dict) -> IndexField:
        return IndexField(
            name=response.get("FieldName"),
            value=response.get("Item"),
            item_type=response.get("ItemElementName") or "String",
        )

    def _parse_document(self, response: dict) -> DocumentDetails:
        return DocumentDetails(
                #base
                engine=self._get_engine_name(),
                id=response.get("Id"),
                container_id=response.get("FileCabinetId"),
                links=self._parse_links(response),

                #details
                title=response.get("Title"),
                fields=[self._parse_index_field(field) for field in response.get("Fields") or []],
                content_type=response.get("ContentType"),
                total_pages=response.get("TotalPages"),
            )

    def _parse_index_fields(self, response: dict) -> list[IndexField]:
        return [self._parse_index_field(field) for field in response.get("Field", [])]

    def _parse_token(self, response: httpx.Response) -> str:
        try:
            token = response.json()
        except ValueError:
            token = response.text
        return str(token).strip().strip('"')
