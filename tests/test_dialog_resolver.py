import pytest

from services.repository.DialogResolver import select_default_dialog
from shared.clients.dms.models.Container import Container, ContainerKind
from shared.clients.dms.models.Dialog import DialogInfo, DialogKind
from shared.clients.dms.models.Link import REL_COUNT, REL_DIALOG_EXPRESSION
from shared.errors.PlatformErrors import DialogConfigurationError


def _infos(*flags):
    return [DialogInfo(id=f"d{index}", kind=DialogKind.SEARCH, is_default=flag) for index, flag in enumerate(flags)]


def test_cabinet_takes_first_dialog_flagged_default():
    cabinet = Container(engine="DocuWare", id="c", name="C", kind=ContainerKind.CABINET)
    assert select_default_dialog(cabinet, _infos(False, True, True)).id == "d1"


def test_tray_takes_first_dialog_not_flagged_default():
    tray = Container(engine="DocuWare", id="t", name="T", kind=ContainerKind.TRAY)
    assert select_default_dialog(tray, _infos(True, False, False)).id == "d1"
    assert select_default_dialog(tray, _infos(True, True)) is None


def test_default_search_dialog_of_cabinet(service, session):
    cabinet = service.catalog.resolve_by_name(session, "Invoices", ContainerKind.CABINET)
    dialog = service.dialogs.default_search_dialog(session, cabinet)
    assert dialog.id == "invoices-search-1"
    assert dialog.container_id == "invoices"
    assert dialog.has_link(REL_DIALOG_EXPRESSION)
    assert dialog.has_link(REL_COUNT)


def test_default_store_dialog_of_tray(service, session):
    tray = service.catalog.resolve_by_name(session, "Inbox", ContainerKind.TRAY)
    dialog = service.dialogs.default_store_dialog(session, tray)
    assert dialog.id == "inbox-store-1"
    assert dialog.kind is DialogKind.STORE
    assert dialog.is_default is False


def test_missing_default_dialog_is_absent(service, session):
    broken = service.catalog.resolve_by_name(session, "Broken", ContainerKind.CABINET)
    assert service.dialogs.default_search_dialog(session, broken) is None
    with pytest.raises(DialogConfigurationError):
        service.dialogs.require_store_dialog(session, broken)
