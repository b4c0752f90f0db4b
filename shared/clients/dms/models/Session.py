"""Authenticated session handle returned by a DMS client."""

import httpx

from shared.clients.dms.models.Organization import Organization


class PlatformSession:
    """
    Owns the HTTP client (and with it the authentication cookies) of one logon.

    The session is passed explicitly into every operation. It is not
    thread-safe; callers either serialize access or use one session per thread.
    """

    def __init__(self, http_client: httpx.Client, server_url: str, organization: Organization | None = None) -> None:
        self.http_client = http_client
        self.server_url = server_url.rstrip("/")
        self.organization = organization
        self.closed = False

    @property
    def cookies(self) -> httpx.Cookies:
        return self.http_client.cookies

    def require_organization(self) -> Organization:
        if self.organization is None:
            raise ValueError("Session is not bound to an organization.")
        return self.organization

    def __repr__(self) -> str:
        org = self.organization.name if self.organization else None
        return f"PlatformSession(server_url={self.server_url!r}, organization={org!r}, closed={self.closed})"
