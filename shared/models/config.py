from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A configuration key a client needs before it can talk to its backend.

    Attributes:
        env_key (str): The raw key name; the client prefixes it with its type and engine (e.g. "BASE_URL" -> "DMS_DOCUWARE_BASE_URL").
        val_type (str): One of "string", "number", "bool" or "list".
        default (str | int | bool | list | None): Value used when the variable is unset. None makes the key mandatory.
    """

    env_key: str
    val_type: str
    default: str | int | bool | list | None = None
