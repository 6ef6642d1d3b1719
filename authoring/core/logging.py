"""
Logging setup for hosts embedding the authoring engine.
"""
import logging
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from authoring.core.config import Settings, get_settings

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FIELDS = '%(asctime)s %(name)s %(levelname)s %(message)s'

_HANDLER_NAME = "authoring"


def build_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter matching the LOG_FORMAT setting."""
    if log_format == "json":
        return JsonFormatter(JSON_FIELDS, rename_fields={"levelname": "level", "name": "logger"})
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(settings: Optional[Settings] = None) -> logging.Handler:
    """
    Install the engine's root handler.

    Calling it again swaps the previously installed handler instead of
    stacking a second one; handlers owned by the host are left alone.
    """
    settings = settings or get_settings()
    root = logging.getLogger()

    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(build_formatter(settings.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL))
    return handler
