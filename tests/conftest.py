"""Pytest configuration and fixtures."""

import logging

import httpx
import pytest

from fake_platform import BASE_URL, FakePlatform
from services.repository.PlatformService import PlatformService
from shared.clients.dms.docuware.DMSClientDocuware import DMSClientDocuware
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger

CONFIG_KEYS = (
    "DMS_ENGINES",
    "DMS_TIMEOUT",
    "DMS_DOCUWARE_BASE_URL",
    "DMS_DOCUWARE_PLATFORM_PATH",
    "DMS_DOCUWARE_ORGANIZATION",
    "DMS_DOCUWARE_USERNAME",
    "DMS_DOCUWARE_PASSWORD",
    "DMS_DOCUWARE_TOKEN",
    "QUERY_PAGE_SIZE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Make sure the developer's environment does not leak into the tests."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def helper_config():
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def platform():
    """A platform with two cabinets, two trays and a cabinet without usable dialogs."""
    fake = FakePlatform()
    fake.add_container("invoices", "Invoices")
    fake.add_container("contracts", "Contracts")
    fake.add_container("inbox", "Inbox", is_tray=True, default_flags=(True, False))
    fake.add_container("scans", "Scans", is_tray=True, default_flags=(True, False))
    fake.add_container("broken", "Broken", default_flags=(False, False))

    for number in range(1, 8):
        fake.add_document("invoices", f"Invoice {number}", {"COMPANY": "ACME" if number % 2 else "Globex", "AMOUNT": str(number * 100)}, pages=2)
    for number in range(1, 6):
        fake.add_document("contracts", f"Contract {number}", {"STATUS": "Draft", "CUSTOMER": f"C{number}"})
    fake.add_document("inbox", "Scanned letter", {"COMPANY": "Initech"}, pages=4)
    return fake


@pytest.fixture
def dms_client(helper_config, platform):
    return DMSClientDocuware(helper_config=helper_config, transport=httpx.MockTransport(platform.handle))


@pytest.fixture
def session(dms_client):
    session = dms_client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="secret")
    try:
        yield session
    finally:
        dms_client.close(session)


@pytest.fixture
def service(helper_config, dms_client):
    return PlatformService(helper_config=helper_config, dms_client=dms_client)
