"""Environment-backed configuration of the platform bridge."""

import logging
import os

_TRUE_VALUES = ("true", "1", "yes")


class HelperConfig:
    """Reads the bridge settings (DMS_*, QUERY_PAGE_SIZE, LOG_LEVEL, ...) from environment variables
    and hands out the shared logger.

    Empty variables count as unset. A getter called without a default treats
    its key as mandatory.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read_raw(self, key: str) -> str | None:
        value = os.getenv(key.upper())
        return value.strip() if value and value.strip() else None

    def _missing(self, key: str) -> ValueError:
        return ValueError(f"Environment variable '{key.upper()}' is not set.")

    def get_string_val(self, key: str, default: str | None = None) -> str:
        """Read a string setting, e.g. DMS_DOCUWARE_BASE_URL.

        Raises:
            ValueError: If the variable is unset and there is no default.
        """
        raw = self._read_raw(key)
        if raw is not None:
            return raw
        if default is None:
            raise self._missing(key)
        return default

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric setting. "25" yields an int, "7.5" a float.

        Raises:
            ValueError: If the variable is unset without a default, or not a number.
        """
        raw = self._read_raw(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a flag. Only "true", "1" and "yes" (any case) are true."""
        raw = self._read_raw(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default
        return raw.lower() in _TRUE_VALUES

    def get_list_val(self, key: str, default: list | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a bracketed list such as DMS_ENGINES=[docuware].

        Blank elements are dropped, the rest are stripped and cast to element_type.

        Raises:
            ValueError: If the variable is unset without a default, lacks the brackets or holds an element that cannot be cast.
        """
        raw = self._read_raw(key)
        if raw is None:
            if default is None:
                raise self._missing(key)
            return default

        if not (raw.startswith("[") and raw.endswith("]")):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        parts = (part.strip() for part in raw[1:-1].split(separator))

        try:
            return [element_type(part) for part in parts if part]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' holds an element that is not a {element_type.__name__}: {e}. Got: '{raw}'")

    def get_logger(self) -> logging.Logger:
        return self._logger
