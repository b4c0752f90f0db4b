import logging

import httpx
import pytest

from fake_platform import BASE_URL
from runner import platform_runner
from shared.clients.dms.DMSClientManager import DMSClientManager
from shared.clients.dms.models.Container import ContainerKind
from shared.clients.dms.models.Query import QueryCondition, QueryExpression
from shared.errors.PlatformErrors import NotFoundError


def test_name_based_count_and_listing(service, session):
    assert service.get_total_amount_of_documents(session, "contracts", ContainerKind.CABINET) == 5
    titles = [doc.title for doc in service.get_all_documents(session, "CONTRACTS", ContainerKind.CABINET)]
    assert titles == [f"Contract {number}" for number in range(1, 6)]


def test_name_based_paging(service, session):
    page = service.get_documents_using_paging(session, "Invoices", ContainerKind.CABINET, start=6, page_size=3)
    assert [doc.title for doc in page.items] == ["Invoice 7"]
    assert page.start_offset == 6


def test_name_based_query(service, session):
    expression = QueryExpression(conditions=[QueryCondition(field_name="COMPANY", values=["Initech"])])
    documents = service.get_documents_by_query(session, "inbox", ContainerKind.TRAY, expression)
    assert [doc.title for doc in documents] == ["Scanned letter"]


def test_name_based_access_to_unknown_container(service, session):
    with pytest.raises(NotFoundError):
        service.get_all_documents(session, "Archive", ContainerKind.CABINET)


def test_report_containers(service, session):
    counts = platform_runner.report_containers(service, session)
    assert counts == {"Invoices": 7, "Contracts": 5, "Inbox": 1, "Scans": 0, "Broken": None}


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def _configure(monkeypatch, tmp_path, platform, password="secret"):
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("DMS_DOCUWARE_BASE_URL", BASE_URL)
    monkeypatch.setenv("DMS_DOCUWARE_ORGANIZATION", "Peters Engineering")
    monkeypatch.setenv("DMS_DOCUWARE_USERNAME", "admin")
    monkeypatch.setenv("DMS_DOCUWARE_PASSWORD", password)
    transport = httpx.MockTransport(platform.handle)
    monkeypatch.setattr(
        platform_runner,
        "DMSClientManager",
        lambda helper_config: DMSClientManager(helper_config=helper_config, transport=transport),
    )


@pytest.mark.usefixtures("restore_logging")
def test_main_reports_and_logs_off(monkeypatch, tmp_path, platform):
    _configure(monkeypatch, tmp_path, platform)
    assert platform_runner.main() == 0
    assert platform.logoff_count == 1
    assert (tmp_path / "logs" / "app.log").exists()


@pytest.mark.usefixtures("restore_logging")
def test_main_fails_on_refused_logon(monkeypatch, tmp_path, platform):
    _configure(monkeypatch, tmp_path, platform, password="wrong")
    assert platform_runner.main() == 1
    assert platform.logoff_count == 0
