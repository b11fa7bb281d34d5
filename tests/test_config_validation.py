"""
Unit tests for configuration defaults, environment overrides and
startup validation warnings.
"""

import logging

import pytest
from pydantic import ValidationError

from customers_api.config import (
    APIConfig,
    LoggingConfig,
    ServiceConfig,
    Settings,
    StorageConfig,
)


def test_defaults():
    settings = Settings()

    assert settings.service.port == 2019
    assert settings.service.host == "0.0.0.0"
    assert settings.storage.customer_db_path == "./data/customers.db"
    assert settings.api.not_found_as_404 is False
    assert settings.api.fatal_on_delete_failure is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SERVICE_PORT", "8080")
    monkeypatch.setenv("STORAGE_CUSTOMER_DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("API_NOT_FOUND_AS_404", "true")
    monkeypatch.setenv("LOGGING_JSON_OUTPUT", "false")

    assert ServiceConfig().port == 8080
    assert StorageConfig().customer_db_path == "/tmp/other.db"
    assert APIConfig().not_found_as_404 is True
    assert LoggingConfig().json_output is False


def test_invalid_port_rejected():
    with pytest.raises(ValidationError):
        ServiceConfig(port=70000)


def test_empty_db_path_rejected():
    with pytest.raises(ValidationError, match="customer_db_path cannot be empty"):
        StorageConfig(customer_db_path="  ")


def test_slow_request_thresholds_must_be_ordered():
    with pytest.raises(ValidationError, match="slow_request_error_ms"):
        LoggingConfig(slow_request_warning_ms=200.0, slow_request_error_ms=100.0)


def test_validate_configuration_warns_on_fatal_delete(caplog):
    settings = Settings(api=APIConfig(fatal_on_delete_failure=True))

    with caplog.at_level(logging.WARNING):
        settings.validate_configuration()

    assert any("fatal_on_delete_failure is enabled" in r.message for r in caplog.records)


def test_validate_configuration_warns_on_memory_db(caplog):
    settings = Settings(storage=StorageConfig(customer_db_path=":memory:"))

    with caplog.at_level(logging.WARNING):
        settings.validate_configuration()

    assert any(":memory:" in r.message for r in caplog.records)


def test_validate_configuration_quiet_by_default(caplog):
    settings = Settings(storage=StorageConfig(customer_db_path="./data/customers.db"))

    with caplog.at_level(logging.WARNING):
        settings.validate_configuration()

    assert caplog.records == []
