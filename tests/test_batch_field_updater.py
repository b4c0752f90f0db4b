import json

import pytest

from shared.clients.dms.models.Container import ContainerKind
from shared.clients.dms.models.Document import IndexField
from shared.clients.dms.models.Query import QueryCondition, QueryExpression
from shared.errors.PlatformErrors import ContainerKindError, DialogConfigurationError, ValidationError


@pytest.fixture
def contracts(service, session):
    return service.catalog.resolve_by_name(session, "Contracts", ContainerKind.CABINET)


def _status(platform, container_id, document_id):
    fields = platform.find(container_id, document_id)["Fields"]
    return next(field["Item"] for field in fields if field["FieldName"] == "STATUS")


def test_batch_update_reports_each_document(service, session, contracts, platform):
    ids = [doc.id for doc in service.queries.all(session, contracts)]
    rejected_id = ids[2]
    platform.batch_rejections[rejected_id] = "Document is checked out."

    results = service.batch.update_fields(session, contracts, None, [IndexField(name="STATUS", value="Signed")])

    assert len(results) == 5
    failed = [item for item in results if not item.succeeded]
    assert len(failed) == 1
    assert failed[0].document.id == rejected_id
    assert failed[0].error_message == "Document is checked out."
    for item in results:
        if item.succeeded:
            assert item.document.get_field("STATUS").value == "Signed"
    assert _status(platform, "contracts", rejected_id) == "Draft"


def test_batch_update_request_does_not_stop_on_errors(service, session, contracts, platform):
    service.batch.update_fields(session, contracts, None, [IndexField(name="STATUS", value="Signed")])
    body = json.loads(platform.requests_to("/Operations/BatchUpdate")[0].content)
    assert body["BreakOnError"] is False
    assert body["StoreDialogId"] == "contracts-store-1"
    assert len(body["Source"]["Id"]) == 5


def test_batch_update_only_touches_matching_documents(service, session, contracts, platform):
    expression = QueryExpression(conditions=[QueryCondition(field_name="CUSTOMER", values=["C1", "C2"])])
    results = service.batch.update_fields(session, contracts, expression, [IndexField(name="STATUS", value="Signed")])

    assert [item.document.get_field("CUSTOMER").value for item in results] == ["C1", "C2"]
    statuses = [_status(platform, "contracts", doc["Id"]) for doc in platform.documents["contracts"]]
    assert statuses == ["Signed", "Signed", "Draft", "Draft", "Draft"]


def test_batch_update_without_matches_sends_nothing(service, session, contracts, platform):
    expression = QueryExpression(conditions=[QueryCondition(field_name="CUSTOMER", values=["nobody"])])
    assert service.batch.update_fields(session, contracts, expression, [IndexField(name="STATUS", value="Signed")]) == []
    assert not platform.requests_to("/Operations/BatchUpdate")


def test_batch_update_needs_a_cabinet(service, session, platform):
    inbox = service.catalog.resolve_by_name(session, "Inbox", ContainerKind.TRAY)
    with pytest.raises(ContainerKindError):
        service.batch.update_fields(session, inbox, None, [IndexField(name="STATUS", value="Signed")])
    assert not platform.requests_to("/Query/DialogExpression")


def test_batch_update_needs_default_dialogs(service, session):
    broken = service.catalog.resolve_by_name(session, "Broken", ContainerKind.CABINET)
    with pytest.raises(DialogConfigurationError):
        service.batch.update_fields(session, broken, None, [IndexField(name="STATUS", value="Signed")])


def test_update_document_fields(service, session, contracts, platform):
    contract = service.queries.all(session, contracts)[0]
    fields = service.batch.update_document_fields(session, contract, contracts, [IndexField(name="STATUS", value="Signed")])

    assert ("STATUS", "Signed") in [(field.name, field.value) for field in fields]
    assert _status(platform, "contracts", contract.id) == "Signed"


def test_update_document_fields_rejected_value(service, session, contracts, platform):
    contract = service.queries.all(session, contracts)[0]
    with pytest.raises(ValidationError, match="not-a-date"):
        service.batch.update_document_fields(session, contract, contracts, [IndexField(name="STATUS", value="not-a-date")])
    assert _status(platform, "contracts", contract.id) == "Draft"


def test_batch_update_targets_every_page_of_a_shortened_result(service, session, contracts, platform):
    platform.max_page_size = 2
    results = service.batch.update_fields(session, contracts, None, [IndexField(name="STATUS", value="Signed")])

    assert len(results) == 5
    assert all(item.succeeded for item in results)
    assert [_status(platform, "contracts", doc["Id"]) for doc in platform.documents["contracts"]] == ["Signed"] * 5
    body = json.loads(platform.requests_to("/Operations/BatchUpdate")[0].content)
    assert body["Source"]["Id"] == [doc["Id"] for doc in platform.documents["contracts"]]
    assert len(platform.requests_to("/Operations/BatchUpdate")) == 1


def test_batch_update_with_invalid_value_reports_every_document(service, session, contracts, platform):
    results = service.batch.update_fields(session, contracts, None, [IndexField(name="STATUS", value="not-a-date")])

    assert len(results) == 5
    assert not any(item.succeeded for item in results)
    assert all("not-a-date" in item.error_message for item in results)
    assert [_status(platform, "contracts", doc["Id"]) for doc in platform.documents["contracts"]] == ["Draft"] * 5
