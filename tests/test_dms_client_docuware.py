from datetime import timedelta

import httpx
import pytest

from fake_platform import BASE_URL, ROOT
from shared.clients.dms.DMSClientManager import DMSClientManager
from shared.clients.dms.docuware.DMSClientDocuware import DMSClientDocuware, format_timespan
from shared.errors.PlatformErrors import RequestRejectedError, TransportError


def test_connect_binds_first_organization(session, platform):
    assert session.organization.name == "Peters Engineering"
    assert session.cookies.get(".DWPLATFORMAUTH") == "cookie-1"
    logon = platform.requests_to("/Account/Logon")[0]
    assert b"LicenseType=PlatformService" in logon.content
    assert b"Organization=Peters+Engineering" in logon.content


def test_connect_with_wrong_password_raises_transport_error(dms_client, platform):
    with pytest.raises(TransportError):
        dms_client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="wrong")
    assert not platform.requests_to("/Organizations")


def test_close_is_idempotent(dms_client, platform):
    session = dms_client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="secret")
    dms_client.close(session)
    dms_client.close(session)
    assert session.closed
    assert platform.logoff_count == 1


def test_closed_session_refuses_requests(dms_client, platform):
    session = dms_client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="secret")
    dms_client.close(session)
    sent = len(platform.requests)
    with pytest.raises(TransportError, match="closed"):
        dms_client.do_fetch_containers(session)
    assert len(platform.requests) == sent


def test_multi_use_token_round_trip(dms_client, session, platform):
    token = dms_client.request_multi_use_token(session, timedelta(hours=1))
    assert token == "token-1"
    assert platform.issued_lifetimes == ["01:00:00"]

    second = dms_client.connect_with_token(BASE_URL, token)
    try:
        assert second.organization.id == "org-1"
        assert second.cookies.get(".DWPLATFORMAUTH") == "cookie-2"
    finally:
        dms_client.close(second)


def test_token_lifetime_must_be_positive(dms_client, session):
    with pytest.raises(ValueError):
        dms_client.request_multi_use_token(session, timedelta(0))


def test_unknown_token_is_refused(dms_client):
    with pytest.raises(TransportError):
        dms_client.connect_with_token(BASE_URL, "forged")


@pytest.mark.parametrize(
    "lifetime, expected",
    [
        (timedelta(minutes=90), "01:30:00"),
        (timedelta(days=2), "2.00:00:00"),
        (timedelta(days=1, hours=3, minutes=4, seconds=5), "1.03:04:05"),
    ],
)
def test_format_timespan(lifetime, expected):
    assert format_timespan(lifetime) == expected


def test_connect_from_config_with_credentials(monkeypatch, dms_client):
    monkeypatch.setenv("DMS_DOCUWARE_BASE_URL", BASE_URL)
    monkeypatch.setenv("DMS_DOCUWARE_ORGANIZATION", "Peters Engineering")
    monkeypatch.setenv("DMS_DOCUWARE_USERNAME", "admin")
    monkeypatch.setenv("DMS_DOCUWARE_PASSWORD", "secret")
    session = dms_client.connect_from_config()
    try:
        assert session.server_url == BASE_URL
    finally:
        dms_client.close(session)


def test_connect_from_config_prefers_token(monkeypatch, dms_client, platform):
    platform.tokens.add("stored-token")
    monkeypatch.setenv("DMS_DOCUWARE_BASE_URL", BASE_URL + "/")
    monkeypatch.setenv("DMS_DOCUWARE_TOKEN", "stored-token")
    session = dms_client.connect_from_config()
    try:
        assert session.server_url == BASE_URL
        assert platform.requests_to("/Account/TokenLogOn")
        assert not platform.requests_to("/Account/Logon")
    finally:
        dms_client.close(session)


def test_connect_from_config_without_base_url_raises(dms_client):
    with pytest.raises(ValueError):
        dms_client.connect_from_config()


def test_cookie_hooks_are_used(helper_config, platform):
    saved = []

    class RememberingClient(DMSClientDocuware):
        def load_cookies(self):
            return httpx.Cookies({"remembered": "yes"})

        def save_cookies(self, cookies):
            saved.append(cookies.get(".DWPLATFORMAUTH"))

    client = RememberingClient(helper_config=helper_config, transport=httpx.MockTransport(platform.handle))
    session = client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="secret")
    try:
        assert saved == ["cookie-1"]
        assert "remembered=yes" in platform.requests_to("/Account/Logon")[0].headers["cookie"]
    finally:
        client.close(session)


def test_rejected_request_carries_server_message(dms_client, session):
    with pytest.raises(RequestRejectedError) as excinfo:
        dms_client.do_request(session, method="GET", endpoint=f"{ROOT}/FileCabinets/nope")
    assert excinfo.value.status_code == 404
    assert excinfo.value.server_message == "File cabinet nope not found"


def test_network_failure_becomes_transport_error(helper_config):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = DMSClientDocuware(helper_config=helper_config, transport=httpx.MockTransport(unreachable))
    with pytest.raises(TransportError, match="could not be sent"):
        client.connect(BASE_URL, organization_name="Peters Engineering", user_name="admin", password="secret")


def test_healthcheck(dms_client, session):
    assert dms_client.do_healthcheck(session).status_code == 200


def test_client_manager_defaults_to_docuware(helper_config, platform):
    manager = DMSClientManager(helper_config=helper_config, transport=httpx.MockTransport(platform.handle))
    assert isinstance(manager.get_client(), DMSClientDocuware)
    assert manager.get_client().get_engine_name() == "docuware"


def test_client_manager_rejects_unknown_engine(monkeypatch, helper_config):
    monkeypatch.setenv("DMS_ENGINES", "[nonexistent]")
    with pytest.raises(ValueError, match="Unsupported DMS engine"):
        DMSClientManager(helper_config=helper_config)
