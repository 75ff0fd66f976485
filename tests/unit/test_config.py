"""Tests for settings loading and logging setup."""

import pytest
import structlog
from structlog.testing import capture_logs

from dexcore.config import DEFAULT_SETTINGS, Settings
from dexcore.log_config import configure_logging

ENV_VARS = [
    "DEXCORE_LOG_LEVEL",
    "DEXCORE_JSON_LOGS",
    "DEXCORE_HOST",
    "DEXCORE_PORT",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestSettings:
    def test_defaults(self, clean_env: pytest.MonkeyPatch):
        settings = Settings.from_env()
        assert settings == DEFAULT_SETTINGS
        assert settings.log_level == "INFO"
        assert settings.json_logs is False
        assert settings.port == 8000

    def test_from_env(self, clean_env: pytest.MonkeyPatch):
        clean_env.setenv("DEXCORE_LOG_LEVEL", "debug")
        clean_env.setenv("DEXCORE_JSON_LOGS", "true")
        clean_env.setenv("DEXCORE_HOST", "127.0.0.1")
        clean_env.setenv("DEXCORE_PORT", "9000")

        settings = Settings.from_env()

        assert settings == Settings(
            log_level="DEBUG",
            json_logs=True,
            host="127.0.0.1",
            port=9000,
        )

    def test_invalid_port(self, clean_env: pytest.MonkeyPatch):
        clean_env.setenv("DEXCORE_PORT", "not-a-port")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_SETTINGS.port = 1  # type: ignore[misc]


class TestConfigureLogging:
    def test_level_filters(self, reset_structlog):
        configure_logging("WARNING")
        logger = structlog.get_logger()
        with capture_logs() as logs:
            logger.info("hidden")
            logger.warning("shown", pair="0x01")
        assert logs == [{"event": "shown", "pair": "0x01", "log_level": "warning"}]

    def test_unknown_level(self, reset_structlog):
        with pytest.raises(KeyError):
            configure_logging("LOUD")

    def test_json_output(self, reset_structlog, capsys: pytest.CaptureFixture[str]):
        configure_logging("INFO", json_output=True)
        structlog.get_logger().info("pair_created", pair="0xabc")
        out = capsys.readouterr().out
        assert '"event": "pair_created"' in out
        assert '"pair": "0xabc"' in out
