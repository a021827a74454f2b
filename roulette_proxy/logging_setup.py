"""Logging configuration for the proxy process."""

import logging

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(service)s %(message)s"

_LOGGING_CONFIGURED = False


class _ServiceFilter(logging.Filter):
    def __init__(self, service: str | None):
        super().__init__()
        self._service = service or "roulette-proxy"

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self._service
        return True


def configure_logging(service_name: str | None = None, level: str = "INFO") -> None:
    """Install a JSON stream handler on the root logger (once per process)."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(LOG_FORMAT))
    handler.addFilter(_ServiceFilter(service_name))
    root.addHandler(handler)

    _LOGGING_CONFIGURED = True


def reset_logging() -> None:
    """Reset logging configuration for tests."""
    global _LOGGING_CONFIGURED
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    _LOGGING_CONFIGURED = False
