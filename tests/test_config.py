import pytest
from pydantic import ValidationError

from hollaex_sdk.config import (
    ClientConfig,
    ConfigLoadError,
    ConnectionSettings,
    LogFormat,
    LogLevel,
    load_config,
)
from hollaex_sdk.exceptions import ConfigurationError, HollaExError


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig()

        assert config.api_url == "https://api.hollaex.com/v2"
        assert config.api_expires_after == 60
        assert config.connection.reconnect_interval_seconds == 5
        assert config.connection.auto_reconnect is True
        assert not config.has_credentials

    def test_derived_urls(self):
        config = ClientConfig(api_url="https://api.example.com/v2/")

        assert config.api_url == "https://api.example.com/v2"
        assert config.rest_root == "https://api.example.com"
        assert config.base_path == "/v2"
        assert config.ws_url == "wss://api.example.com/stream"

    def test_plain_http_streams_over_ws(self):
        assert ClientConfig(api_url="http://localhost:8080/v2").ws_url == "ws://localhost:8080/stream"

    @pytest.mark.parametrize("fields", [{"api_key": "K"}, {"api_secret": "S"}])
    def test_half_configured_credentials_fail_fast(self, fields):
        with pytest.raises(ValidationError):
            ClientConfig(**fields)

    def test_blank_credentials_count_as_absent(self):
        assert not ClientConfig(api_key=" ", api_secret="").has_credentials

    def test_rejects_relative_url(self):
        with pytest.raises(ValidationError):
            ClientConfig(api_url="/v2")

    def test_is_frozen(self):
        config = ClientConfig()
        with pytest.raises(ValidationError):
            config.api_key = "K"

    def test_secret_not_in_repr(self):
        assert "S3CR3T" not in repr(ClientConfig(api_key="K", api_secret="S3CR3T"))

    def test_connection_bounds(self):
        with pytest.raises(ValidationError):
            ConnectionSettings(ping_interval_seconds=0)


class TestLoader:
    def test_env_only(self):
        config = load_config(environ={"HOLLAEX_API_KEY": "K", "HOLLAEX_API_SECRET": "S"})

        assert config.has_credentials
        assert config.api_url == "https://api.hollaex.com/v2"

    def test_yaml_with_env_override(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text(
            "api:\n"
            "  url: https://api.example.com/v2\n"
            "  key: file-key\n"
            "  secret: file-secret\n"
            "  expires_after: 30\n"
            "connection:\n"
            "  reconnect_interval_seconds: 2\n"
            "logging:\n"
            "  format: text\n"
        )

        config = load_config(path, environ={"HOLLAEX_API_KEY": "env-key", "LOG_LEVEL": "debug"})

        assert config.api_url == "https://api.example.com/v2"
        assert config.api_key == "env-key"
        assert config.api_secret == "file-secret"
        assert config.api_expires_after == 30
        assert config.connection.reconnect_interval_seconds == 2
        assert config.logging.format is LogFormat.TEXT
        assert config.logging.level is LogLevel.DEBUG

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text("api: [unclosed\n")

        with pytest.raises(ConfigLoadError):
            load_config(path, environ={})

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text("connection:\n  unknown_setting: 1\n")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path, environ={})
        assert exc_info.value.file_path == path

    def test_load_errors_are_sdk_errors(self, tmp_path):
        with pytest.raises(HollaExError) as exc_info:
            load_config(tmp_path / "missing.yaml", environ={})

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.file_path == tmp_path / "missing.yaml"
