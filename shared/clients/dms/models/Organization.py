"""Organization a platform session is bound to."""

from shared.clients.dms.models.Link import LinkedModel


class Organization(LinkedModel):
    """
    The organization context of an authenticated session. Its relations lead to the containers and the login token endpoint.
    """
    engine: str
    id: str
    name: str
