import json
import logging

import pytest
from pydantic import ValidationError

from authoring.core.config import Settings, get_settings
from authoring.core.errors import AuthoringError, InvalidPageSizeError, UnknownFormatError
from authoring.core.logging import TEXT_FORMAT, build_formatter, configure_logging


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.IMPORT_MAX_WORKERS == 4
    assert settings.IMPORT_TIMEOUT_SECONDS is None
    assert settings.CSV_LIST_SEPARATOR == "|"
    assert (settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE) == (20, 100)
    assert settings.is_development()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    monkeypatch.setenv("IMPORT_TIMEOUT_SECONDS", "2.5")
    settings = get_settings()
    assert settings.is_production()
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.IMPORT_TIMEOUT_SECONDS == 2.5
    assert get_settings() is settings


@pytest.mark.parametrize("name, value", [
    ("LOG_LEVEL", "LOUD"),
    ("LOG_FORMAT", "xml"),
    ("IMPORT_MAX_WORKERS", "0"),
    ("CSV_LIST_SEPARATOR", "||"),
])
def test_invalid_settings_are_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_json_formatter_renames_fields():
    record = logging.LogRecord("authoring.interchange.bulk", logging.INFO, __file__, 1, "Imported 4", None, None)
    payload = json.loads(build_formatter("json").format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "authoring.interchange.bulk"
    assert payload["message"] == "Imported 4"


def test_text_formatter():
    assert build_formatter("text")._fmt == TEXT_FORMAT


def test_configure_logging_replaces_only_its_own_handler():
    root = logging.getLogger()
    host_handler = logging.NullHandler()
    root.addHandler(host_handler)
    previous_level = root.level
    try:
        first = configure_logging(Settings(_env_file=None, LOG_LEVEL="WARNING"))
        second = configure_logging(Settings(_env_file=None, LOG_FORMAT="text"))

        assert first not in root.handlers
        assert second in root.handlers
        assert host_handler in root.handlers
        assert root.level == logging.INFO
    finally:
        for handler in (host_handler, second):
            root.removeHandler(handler)
        root.setLevel(previous_level)


def test_error_envelope():
    error = UnknownFormatError("Unknown format 'yaml'")
    assert isinstance(error, AuthoringError)
    assert isinstance(error, ValueError)
    assert error.to_dict() == {"error": {"message": "Unknown format 'yaml'", "type": "unknown_format"}}
    assert "must not exceed 100" in str(InvalidPageSizeError(500, 100))
