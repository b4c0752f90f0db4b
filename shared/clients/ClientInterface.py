from abc import ABC, abstractmethod

import httpx
from httpx._types import QueryParamTypes, RequestContent, RequestData
from typing import Any
from shared.models.config import EnvConfig
from shared.clients.dms.models.Session import PlatformSession
from shared.errors.PlatformErrors import RequestRejectedError, TransportError

from shared.helper.HelperConfig import HelperConfig


class ClientInterface(ABC):
    def __init__(self, helper_config: HelperConfig, transport: httpx.BaseTransport | None = None):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)

        # custom transport, e.g. httpx.MockTransport in tests
        self._transport = transport
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every required configuration key once, so a misconfigured client fails at construction.

        Raises:
            ValueError: Naming every missing or malformed key.
        """
        problems = []
        for config in self._get_required_config():
            try:
                self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)
            except ValueError as e:
                problems.append(str(e))
        if problems:
            raise ValueError(f"{self.get_client_type().upper()} client '{self.get_engine_name()}' is misconfigured: " + " ".join(problems))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the type of the client in lowercase. E.g. "dms"
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    def get_engine_name(self) -> str:
        """
        Returns the engine name in lowercase, as used in configuration keys and module paths. E.g. "docuware"
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """
        Returns the display name of the engine. E.g. "DocuWare"
        """
        pass

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns:
            list[EnvConfig]: The keys validated when the client is constructed.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        """
        Returns:
            str: The environment variable behind a raw key. E.g. "BASE_URL" -> "DMS_DOCUWARE_BASE_URL"
        """
        return "_".join((self.get_client_type(), self.get_engine_name(), raw_key)).upper()

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads a configuration value scoped to this client.

        Args:
            raw_key (str): The key without the client prefix, e.g. "BASE_URL"
            default (Any): Returned if the variable is unset. None makes the key mandatory.
            val_type (str): "string", "number", "bool" or "list"
        """
        readers = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        if val_type not in readers:
            raise ValueError(f"Unsupported config value type '{val_type}' for key '{raw_key}' of {self.get_client_type().upper()} client '{self.get_engine_name()}'.")
        return readers[val_type](self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self, session: PlatformSession) -> dict:
        """
        Returns additional authentication headers for a request of the given session.

        Returns:
            dict: A dictionary containing the auth data, empty if the session authenticates via cookies
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns the endpoint path for healthcheck requests.

        Returns:
            str: The endpoint path for healthcheck requests (e.g. "/DocuWare/Platform/Organizations")
        """
        pass

    def _build_url(self, session: PlatformSession, endpoint: str) -> str:
        """
        Turns an endpoint path or a hypermedia href into an absolute URL.
        Absolute URLs are kept, server-relative hrefs are resolved against the session's server URL.
        """
        endpoint = endpoint.strip()
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{session.server_url}/{endpoint.lstrip('/')}"

    ##########################################
    ############### REQUESTS #################
    ##########################################

    def do_healthcheck(self, session: PlatformSession) -> httpx.Response:
        """Check if the client backend is reachable and the session is still authenticated.

        Returns:
            httpx.Response: The response from the healthcheck request.
        """
        return self.do_request(session, method="GET", endpoint=self._get_endpoint_healthcheck())

    ##########################################
    ############ CORE REQUESTS ###############
    ##########################################

    def _create_http_client(self, cookies: httpx.Cookies | None = None) -> httpx.Client:
        """Create the HTTP client a new session will own."""
        kwargs: dict = {
            "timeout": self.timeout,
            "cookies": cookies,
            "follow_redirects": True,
            "headers": {"Accept": "application/json"},
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    def _extract_error_message(self, response: httpx.Response) -> str | None:
        """Return the human readable error message of a failed response, if the backend sent one."""
        try:
            payload = response.json()
        except ValueError:
            return response.text or None
        if isinstance(payload, dict):
            return payload.get("Message") or payload.get("message")
        return str(payload)

    def do_request(
        self,
        session: PlatformSession,
        method: str = "GET",
        content: RequestContent | None = None,
        data: RequestData | None = None,
        json: Any = None,
        params: QueryParamTypes | None = None,
        endpoint: str = "",
        additional_headers: dict | None = None,
        raise_on_error: bool = True,
    ) -> httpx.Response:
        """Send an HTTP request within the given session.

        Args:
            session: The authenticated session to use.
            method: HTTP method (GET, POST, PUT, DELETE, …).
            content: Raw bytes / string body.
            data: Form-encoded body (dict or list of tuples).
            json: JSON-serialisable body (sets Content-Type automatically).
            params: URL query parameters.
            endpoint: Endpoint path or hypermedia href.
            additional_headers: Extra headers that override the defaults.
            raise_on_error: Raise RequestRejectedError on a non-2xx status.

        Returns:
            The raw httpx.Response.

        Raises:
            TransportError: If the session is closed, the request cannot be sent or authentication is refused.
            RequestRejectedError: If the response has a non-2xx status (when raise_on_error is True).
        """
        if session.closed:
            raise TransportError("Session is closed. Connect again before making requests.")

        headers: dict = {}
        headers.update(self._get_auth_header(session))
        if additional_headers:
            headers.update(additional_headers)

        kwargs: dict = {
            "url": self._build_url(session, endpoint),
            "headers": headers,
            "params": params,
        }

        # add exactly one body argument
        if content is not None:
            kwargs["content"] = content
        elif data is not None:
            kwargs["data"] = data
        elif json is not None:
            kwargs["json"] = json

        try:
            response = session.http_client.request(method, **kwargs)
        except httpx.TransportError as e:
            self.logging.error("Request %s %s could not be sent: %s", method, kwargs["url"], e)
            raise TransportError(f"Request {method} {kwargs['url']} could not be sent: {e}") from e

        if response.status_code in (401, 403):
            self.logging.error("Request to %s was refused with status %d", kwargs["url"], response.status_code)
            raise TransportError(f"Authentication refused for {kwargs['url']} (status {response.status_code})")

        if raise_on_error and response.status_code >= 300:
            message = self._extract_error_message(response)
            self.logging.error(
                "Request to %s failed with status %d: %s",
                kwargs["url"],
                response.status_code,
                message,
            )
            raise RequestRejectedError(response.status_code, kwargs["url"], message)

        return response
