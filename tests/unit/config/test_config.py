"""Tests for Config Pydantic Settings."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from authlink.config import (
    BackendConfig,
    Config,
    LoggingConfig,
    NonceConfig,
    configure_logging,
)
from authlink.domain.linking.port.authorizer import Scope


class TestConfigDefaults:
    def test_defaults(self) -> None:
        config = Config()

        assert config.nonce.length == 32
        assert config.nonce.batch_size == 16
        assert config.apple.scopes == [Scope.FULL_NAME, Scope.EMAIL]
        assert config.backend.base_url == "https://identitytoolkit.googleapis.com/v1"
        assert config.backend.timeout == 10.0

    def test_logging_level_defaults_to_info(self) -> None:
        assert LoggingConfig().level == "INFO"

    def test_backend_disabled_without_api_key(self) -> None:
        assert not Config().backend.enabled
        assert BackendConfig(api_key="k").enabled

    @pytest.mark.parametrize("field", ["length", "batch_size"])
    def test_nonce_settings_must_be_positive(self, field: str) -> None:
        with pytest.raises(ValidationError):
            NonceConfig(**{field: 0})

    def test_env_prefix_is_authlink(self) -> None:
        assert Config.model_config.get("env_prefix") == "AUTHLINK_"


class TestConfigSources:
    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTHLINK_BACKEND__API_KEY", "from-env")
        monkeypatch.setenv("AUTHLINK_NONCE__LENGTH", "48")

        config = Config()

        assert config.backend.api_key == "from-env"
        assert config.backend.enabled
        assert config.nonce.length == 48

    def test_yaml_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "authlink.yaml"
        config_file.write_text(
            "backend:\n"
            "  api_key: from-yaml\n"
            "  request_uri: https://app.example.com\n"
            "nonce:\n"
            "  length: 64\n"
        )
        monkeypatch.setenv("AUTHLINK_CONFIG_FILE", str(config_file))

        config = Config()

        assert config.backend.api_key == "from-yaml"
        assert config.backend.request_uri == "https://app.example.com"
        assert config.nonce.length == 64

    def test_env_wins_over_yaml(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "authlink.yaml"
        config_file.write_text("nonce:\n  length: 64\n")
        monkeypatch.setenv("AUTHLINK_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("AUTHLINK_NONCE__LENGTH", "40")

        assert Config().nonce.length == 40

    def test_missing_yaml_file_is_ignored(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("AUTHLINK_CONFIG_FILE", str(tmp_path / "missing.yaml"))

        assert Config().nonce.length == 32


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_console_handler(self) -> None:
        configure_logging(LoggingConfig(level="DEBUG"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_file_handler(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "authlink.log"
        monkeypatch.setenv("AUTHLINK_LOG_FILE", str(log_file))

        configure_logging(LoggingConfig(level="INFO"))
        logging.getLogger("authlink.test").info("Linked user to auth provider: apple.com")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.FileHandler)
        root.handlers[0].flush()
        assert "apple.com" in log_file.read_text()
