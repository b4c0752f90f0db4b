import httpx

from shared.helper.HelperConfig import HelperConfig
from shared.clients.dms.DMSClientInterface import DMSClientInterface

class DMSClientManager:
    """
    Instantiates the repository connectors named in the DMS_ENGINES configuration.
    """

    def __init__(self, helper_config: HelperConfig, transport: httpx.BaseTransport | None = None):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self._transport = transport
        self.clients = self._initialize_clients()

    def _get_engines_from_env(self) -> list[str]:
        """
        Reads the list of DMS engines from ENV configuration.

        Returns:
            list[str]: Engine names, capitalized the way the client classes are named (e.g. "Docuware").

        Raises:
            ValueError: If no DMS engines are specified in the configuration.
        """
        engines = self.helper_config.get_list_val("DMS_ENGINES", default=["docuware"])
        if not engines:
            raise ValueError("No DMS engines specified in configuration.")
        return [engine.strip().lower().capitalize() for engine in engines]

    def _initialize_clients(self) -> list[DMSClientInterface]:
        """
        Imports shared.clients.dms.<engine>.DMSClient<Engine> for every configured engine and instantiates it.

        Raises:
            ValueError: If an engine is unknown or no client could be instantiated.
        """
        clients = []
        for engine in self._get_engines_from_env():
            className = f"DMSClient{engine}"
            try:
                module = __import__(
                    f"shared.clients.dms.{engine.lower()}.{className}",
                    fromlist=[className],
                )
                client_class = getattr(module, className)
            except (ImportError, AttributeError) as e:
                raise ValueError(f"Unsupported DMS engine specified: '{engine}'. Error: {e}")
            clients.append(client_class(helper_config=self.helper_config, transport=self._transport))
            self.logging.debug("Instantiated DMS client for engine: %s", engine)
        if not clients:
            raise ValueError("No valid DMS clients could be instantiated from the specified engines.")
        return clients

    def get_clients(self) -> list[DMSClientInterface]:
        return self.clients

    def get_client(self) -> DMSClientInterface:
        """
        Returns the first configured client. The orchestration layer works against a single repository.
        """
        return self.clients[0]
