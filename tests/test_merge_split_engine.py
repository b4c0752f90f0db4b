import json

import pytest

from shared.clients.dms.models.Container import ContainerKind
from shared.errors.PlatformErrors import SplitArityError, TransferError


@pytest.fixture
def invoices(service, session):
    return service.catalog.resolve_by_name(session, "Invoices", ContainerKind.CABINET)


@pytest.fixture
def inbox(service, session):
    return service.catalog.resolve_by_name(session, "Inbox", ContainerKind.TRAY)


def _detail_gets(platform, document_id):
    return [r for r in platform.requests if r.method == "GET" and r.url.path.endswith(f"/Documents/{document_id}")]


@pytest.mark.parametrize("operation, tag", [("staple", "Staple"), ("clip", "Clip")])
def test_merge_sends_operation_and_returns_merged_document(service, session, invoices, platform, operation, tag):
    merged = getattr(service.merge_split, operation)(session, [1, 2, 3], invoices)

    assert merged.id == 1
    assert merged.total_pages == 6
    assert service.queries.count(session, invoices) == 5

    request = platform.requests_to("/Operations/ContentMerge")[0]
    assert request.method == "PUT"
    body = json.loads(request.content)
    assert body == {"Documents": [1, 2, 3], "Operation": tag, "Force": True}


def test_merge_of_locked_document_raises_transfer_error(service, session, invoices, platform):
    platform.locked.add(2)
    with pytest.raises(TransferError, match="locked"):
        service.merge_split.staple(session, [1, 2], invoices)
    assert service.queries.count(session, invoices) == 7


def test_split_reloads_list_item_and_divides(service, session, inbox, platform):
    letter = service.queries.all(session, inbox)[0]
    assert not _detail_gets(platform, letter.id)

    result = service.merge_split.split(session, letter, [1], ["Second half"], inbox)

    assert len(_detail_gets(platform, letter.id)) == 1
    first, second = result.items
    assert (first.id, first.total_pages) == (letter.id, 1)
    assert (second.title, second.total_pages) == ("Second half", 3)

    request = platform.requests_to("/Operations/ContentDivide")[0]
    assert request.method == "PUT"
    assert request.url.params["docId"] == str(letter.id)
    assert json.loads(request.content)["Operation"] == "Split"


def test_split_reuses_fully_loaded_document(service, session, dms_client, inbox, platform):
    letter = dms_client.do_fetch_document_details(session, service.queries.all(session, inbox)[0])
    service.merge_split.split(session, letter, [2], [], inbox)
    assert len(_detail_gets(platform, letter.id)) == 1


@pytest.mark.parametrize("boundaries, names", [([1, 2], []), ([1], ["a", "b"])])
def test_split_into_more_than_two_parts_is_refused_before_sending(service, session, inbox, platform, boundaries, names):
    letter = service.queries.all(session, inbox)[0]
    sent = len(platform.requests)
    with pytest.raises(SplitArityError):
        service.merge_split.split(session, letter, boundaries, names, inbox)
    assert len(platform.requests) == sent


def test_split_of_locked_document_raises_transfer_error(service, session, inbox, platform):
    letter = service.queries.all(session, inbox)[0]
    platform.locked.add(letter.id)
    with pytest.raises(TransferError):
        service.merge_split.split(session, letter, [1], [], inbox)
