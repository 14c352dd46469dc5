import pytest

from realtime_client.config import ConfigurationError, env_bool, env_list, reset_default_values
from realtime_client.connection_config import RealtimeConfig, get_realtime_config


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch, tmp_path):
    monkeypatch.setattr("realtime_client.config.runtime._DOTENV_CANDIDATES", (tmp_path / ".env",))
    reset_default_values()
    yield
    reset_default_values()


class TestRealtimeConfig:
    def test_defaults(self, monkeypatch) -> None:
        for name in (
            "REALTIME_SERVER_URL",
            "REALTIME_API_BASE",
            "CONNECTION_TIMEOUT_SECONDS",
            "RECONNECTION_INITIAL_DELAY_SECONDS",
            "RECONNECTION_MAX_DELAY_SECONDS",
            "RECONNECTION_JITTER_SECONDS",
            "MAX_RECONNECT_ATTEMPTS",
            "REALTIME_TRANSPORTS",
        ):
            monkeypatch.delenv(name, raising=False)

        config = get_realtime_config()

        assert config.server_url == "http://localhost:3001"
        assert config.api_base == "http://localhost:3001"
        assert config.connection_timeout_seconds == 60.0
        assert config.transports == ("websocket", "polling")
        assert config.auth_error_retry_delay_seconds == 3.0
        assert config.credential_max_attempts == 3
        assert config.credential_retry_delay_seconds == 0.5

        policy = config.reconnect_policy()
        assert (policy.base_delay, policy.max_delay, policy.max_attempts, policy.jitter) == (1.0, 30.0, 10, 1.0)

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("REALTIME_SERVER_URL", "https://rt.example.com")
        monkeypatch.setenv("REALTIME_API_BASE", "https://api.example.com/")
        monkeypatch.setenv("REALTIME_TRANSPORTS", "websocket, websocket")
        monkeypatch.setenv("MAX_RECONNECT_ATTEMPTS", "4")

        config = RealtimeConfig()

        assert config.server_url == "https://rt.example.com"
        assert config.api_base == "https://api.example.com"
        assert config.transports == ("websocket",)
        assert config.max_reconnect_attempts == 4

    def test_dotenv_values_are_used_as_defaults(self, monkeypatch, tmp_path) -> None:
        monkeypatch.delenv("CONNECTION_TIMEOUT_SECONDS", raising=False)
        (tmp_path / ".env").write_text("# realtime\nexport CONNECTION_TIMEOUT_SECONDS='12'\n")
        reset_default_values()

        assert RealtimeConfig().connection_timeout_seconds == 12.0

    def test_negative_value_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("CONNECTION_TIMEOUT_SECONDS", "-1")

        with pytest.raises(ConfigurationError):
            RealtimeConfig()

    def test_non_numeric_value_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("MAX_RECONNECT_ATTEMPTS", "many")

        with pytest.raises(ConfigurationError):
            RealtimeConfig()

    def test_max_delay_below_initial_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("RECONNECTION_INITIAL_DELAY_SECONDS", "10")
        monkeypatch.setenv("RECONNECTION_MAX_DELAY_SECONDS", "5")

        with pytest.raises(ConfigurationError):
            RealtimeConfig()

    def test_credential_policy_is_fixed_interval(self) -> None:
        policy = RealtimeConfig(credential_retry_delay_seconds=0.25, credential_max_attempts=2).credential_policy()

        assert policy.multiplier == 1.0
        assert policy.jitter == 0.0
        assert policy.base_delay == policy.max_delay == 0.25
        assert policy.max_attempts == 2


class TestRuntimeHelpers:
    def test_env_bool(self, monkeypatch) -> None:
        monkeypatch.setenv("FLAG", "yes")
        assert env_bool("FLAG") is True
        monkeypatch.setenv("FLAG", "off")
        assert env_bool("FLAG") is False
        monkeypatch.setenv("FLAG", "maybe")
        with pytest.raises(ConfigurationError):
            env_bool("FLAG")

    def test_env_list_required(self, monkeypatch) -> None:
        monkeypatch.delenv("ITEMS", raising=False)
        with pytest.raises(ConfigurationError):
            env_list("ITEMS", required=True)
        assert env_list("ITEMS", or_value=["a"]) == ("a",)
