"""Tests for configuration models and loading."""

import pytest
from pydantic import ValidationError

from emq_exporter.config.loader import ConfigLoader
from emq_exporter.config.models import BrokerConfig, ExporterConfig, LoggingConfig, WebConfig
from emq_exporter.config.settings import Settings


class TestModels:
    """Test suite for validation and defaults."""

    def test_defaults_match_reference_exporter(self):
        config = ExporterConfig()

        assert config.broker.uri == "http://127.0.0.1:8080"
        assert config.broker.node == "emq@127.0.0.1"
        assert config.broker.username == "admin"
        assert config.broker.password == "public"
        assert config.broker.concurrent_fetch is True
        assert config.web.listen_address == ":9444"
        assert config.web.telemetry_path == "/metrics"
        assert config.logging.level == "INFO"

    def test_uri_requires_http_scheme(self):
        with pytest.raises(ValidationError):
            BrokerConfig(uri="emq.local:8080")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            BrokerConfig(timeout_seconds=0)

    @pytest.mark.parametrize("node", ["", "emq/../admin"])
    def test_invalid_node(self, node):
        with pytest.raises(ValidationError):
            BrokerConfig(node=node)

    @pytest.mark.parametrize("address", ["9444", "localhost:", ":http", ":70000"])
    def test_invalid_listen_address(self, address):
        with pytest.raises(ValidationError):
            WebConfig(listen_address=address)

    @pytest.mark.parametrize("address,expected", [
        (":9444", ("0.0.0.0", 9444)),
        ("127.0.0.1:9540", ("127.0.0.1", 9540)),
        ("[::1]:9444", ("::1", 9444)),
    ])
    def test_bind_address(self, address, expected):
        assert WebConfig(listen_address=address).bind_address() == expected

    @pytest.mark.parametrize("path", ["metrics", "/"])
    def test_invalid_telemetry_path(self, path):
        with pytest.raises(ValidationError):
            WebConfig(telemetry_path=path)

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingConfig(level="chatty")


class TestConfigLoader:
    """Test suite for YAML loading and overrides."""

    def test_load_from_file_with_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_EMQ_PASSWORD", "s3cret")
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "broker:\n"
            "  uri: http://emq-1:8080\n"
            "  node: emq@10.0.0.5\n"
            "  password: ${TEST_EMQ_PASSWORD}\n"
            "web:\n"
            "  listen_address: ':9540'\n"
        )

        config = ConfigLoader.load_from_file(str(config_file))

        assert config.broker.uri == "http://emq-1:8080"
        assert config.broker.node == "emq@10.0.0.5"
        assert config.broker.password == "s3cret"
        assert config.broker.username == "admin"
        assert config.web.listen_address == ":9540"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load_from_file(str(tmp_path / "nope.yaml"))

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert ConfigLoader.load_from_file(str(config_file)) == ExporterConfig()

    def test_invalid_values_rejected(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("broker:\n  uri: ftp://emq\n")

        with pytest.raises(ValidationError):
            ConfigLoader.load_from_file(str(config_file))

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("broker:\n  node: emq@file\n  username: fromfile\n")

        config = ConfigLoader.load(
            str(config_file),
            overrides={"broker": {"node": "emq@flag", "username": None}}
        )

        assert config.broker.node == "emq@flag"
        assert config.broker.username == "fromfile"

    def test_load_without_file(self):
        config = ConfigLoader.load(None, overrides={"web": {"telemetry_path": "/probe"}})
        assert config.web.telemetry_path == "/probe"
        assert config.broker == BrokerConfig()


class TestSettings:
    """Test suite for environment settings."""

    def test_broker_credentials_only_set_values(self, monkeypatch):
        monkeypatch.setenv("EMQ_PASSWORD", "from-env")
        monkeypatch.delenv("EMQ_USERNAME", raising=False)

        assert Settings.broker_credentials() == {"password": "from-env"}

    def test_unset_variable_is_empty(self, monkeypatch):
        monkeypatch.delenv("EMQ_TEST_UNSET", raising=False)
        assert Settings.get("EMQ_TEST_UNSET") == ""
        assert Settings.get("EMQ_TEST_UNSET", "fallback") == "fallback"
