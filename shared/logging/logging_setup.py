"""Logging bootstrap for the platform bridge.

Console output is colored, the file handler under ``$ROOT_DIR/logs`` always
writes plain text. Timestamps are rendered in ``$TIMEZONE``.
"""

from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os
from logging import Logger

LOGGER_NAME = "platform_bridge"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ANSI_RESET = "\033[0m"
_ANSI_CODES: dict[str, int] = {"red": 31, "green": 32, "yellow": 33, "blue": 34, "magenta": 35, "cyan": 36, "white": 37}

_LEVEL_MARKERS: dict[int, str] = {logging.WARNING: "⚠️ ", logging.ERROR: "⛔ ", logging.CRITICAL: "⛔ "}


def _resolve_level() -> int:
    """LOG_LEVEL accepts any stdlib level name, unknown names fall back to INFO."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "info").strip().upper())
    return level if isinstance(level, int) else logging.INFO


class TimezoneFormatter(logging.Formatter):
    """Formatter with timezone-aware timestamps and a level marker on warnings and errors."""

    def __init__(self, tz_name, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        created = datetime.fromtimestamp(record.created, self.tz)
        return created.strftime(datefmt) if datefmt else created.isoformat()

    def format(self, record):
        # the same record reaches every handler, so mark a copy
        marked = logging.makeLogRecord(record.__dict__)
        marked.msg = _LEVEL_MARKERS.get(record.levelno, "") + record.getMessage()
        marked.args = ()
        return super().format(marked)


class ConsoleFormatter(TimezoneFormatter):
    """Colors a line when the record carries a ``color`` attribute (see :class:`ColorLogger`)."""

    def format(self, record) -> str:
        line = super().format(record)
        code = _ANSI_CODES.get(getattr(record, "color", None) or "")
        return f"\033[{code}m{line}{_ANSI_RESET}" if code else line


class ColorLogger:
    """Wraps a :class:`logging.Logger` and adds a ``color=`` keyword to the log methods.

    Usage::

        logger.info("Resolved cabinet %s", name)
        logger.info("Transfer finished", color="green")
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def _log(self, level: int, msg, args, color: str | None, kwargs: dict) -> None:
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.DEBUG, msg, args, color, kwargs)

    def info(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.INFO, msg, args, color, kwargs)

    def warning(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.WARNING, msg, args, color, kwargs)

    def error(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.ERROR, msg, args, color, kwargs)

    def exception(self, msg, *args, color: str | None = None, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, color, kwargs)

    def __getattr__(self, name):
        # setLevel, handlers, isEnabledFor, ...
        return getattr(self._logger, name)


def _build_config(level: int, log_file: str, tz_name: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "file": {
                "()": TimezoneFormatter,
                "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                "datefmt": DATE_FORMAT,
                "tz_name": tz_name,
            },
            "console": {
                "()": ConsoleFormatter,
                "format": "%(asctime)s - %(levelname)s - %(message)s",
                "datefmt": DATE_FORMAT,
                "tz_name": tz_name,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "level": level,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.FileHandler",
                "formatter": "file",
                "level": level,
                "filename": log_file,
                "encoding": "utf-8",
            },
        },
        "root": {"handlers": ["console", "file"], "level": level},
        # one line per HTTP round trip is only wanted while debugging
        "loggers": {"httpx": {"level": logging.DEBUG if level <= logging.DEBUG else logging.WARNING}},
    }


def setup_logging() -> ColorLogger:
    """Configure root logging from LOG_LEVEL, TIMEZONE and ROOT_DIR.

    Returns:
        ColorLogger: The logger every component of the bridge receives through HelperConfig.
    """
    log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
    os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig(_build_config(
        level=_resolve_level(),
        log_file=os.path.join(log_dir, "app.log"),
        tz_name=os.getenv("TIMEZONE", "Europe/Berlin"),
    ))
    return ColorLogger(logging.getLogger(LOGGER_NAME))
