"""Runtime settings for the dexcore service."""

import os
from dataclasses import dataclass

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class Settings:
    """Process-level configuration.

    Protocol parameters (fees, minimum liquidity) are constants and are not
    configurable here; these settings only cover how the process runs.

    Attributes:
        log_level: Minimum structlog level name (default: INFO)
        json_logs: Render logs as JSON instead of console output
        host: API bind host (default: 0.0.0.0)
        port: API bind port (default: 8000)
    """

    log_level: str = "INFO"
    json_logs: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from DEXCORE_* environment variables, falling back to defaults."""
        return cls(
            log_level=os.environ.get("DEXCORE_LOG_LEVEL", cls.log_level).upper(),
            json_logs=os.environ.get("DEXCORE_JSON_LOGS", "false").lower() in _TRUTHY,
            host=os.environ.get("DEXCORE_HOST", cls.host),
            port=int(os.environ.get("DEXCORE_PORT", str(cls.port))),
        )


# Default configuration instance
DEFAULT_SETTINGS = Settings()
