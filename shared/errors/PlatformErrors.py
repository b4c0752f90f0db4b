"""Error taxonomy of the platform bridge.

Name resolution, container kind and split arity problems are detected on
the client before any request is sent. Everything the remote service
rejects arrives as a RequestRejectedError from the connector and is
translated by the engines into the error that describes the failed call.
"""


class PlatformError(Exception):
    """Base class for every error raised by the platform bridge."""


class NotFoundError(PlatformError):
    """A container name matched nothing."""


class AmbiguousNameError(PlatformError):
    """A container name matched more than one container of the requested kind."""


class ContainerKindError(PlatformError):
    """A cabinet was passed where a tray is required, or the other way round."""


class DialogConfigurationError(PlatformError):
    """The remote container has no dialog matching the default dialog convention.

    This is a configuration problem of the remote container and is not retryable.
    """


class SplitArityError(PlatformError):
    """More than one split boundary or result name was requested."""


class ValidationError(PlatformError):
    """The remote service rejected one or more index field values."""


class TransferError(PlatformError):
    """A transfer, merge or split request was rejected by the remote service."""


class TransportError(PlatformError):
    """Network or authentication failure while talking to the remote service."""


class RequestRejectedError(PlatformError):
    """The remote service answered with a non-success status.

    Attributes:
        status_code (int): The HTTP status returned.
        url (str): The requested URL.
        server_message (str | None): The "Message" of the platform error payload, if any.
    """

    def __init__(self, status_code: int, url: str, server_message: str | None = None):
        self.status_code = status_code
        self.url = url
        self.server_message = server_message
        detail = f": {server_message}" if server_message else ""
        super().__init__(f"Request to {url} failed with status {status_code}{detail}")
