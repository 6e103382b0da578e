"""Config management for mcp-test-server."""
import os
from typing import Optional


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_FORMAT = "plain"

# Level names understood by both logging and uvicorn.
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")

# Bind addresses that are not reachable as-is from a client.
WILDCARD_HOSTS = ("0.0.0.0", "::")


class Config:
    """Configuration container."""

    def __init__(self, data: dict = None):
        self.data = data or {}

    @property
    def host(self) -> str:
        return self.data.get("host") or DEFAULT_HOST

    @property
    def port(self) -> int:
        try:
            return int(self.data.get("port", DEFAULT_PORT))
        except (TypeError, ValueError):
            return DEFAULT_PORT

    @property
    def api_key(self) -> Optional[str]:
        return self.data.get("api_key") or None

    @property
    def log_level(self) -> str:
        """Lower-case level name, or the default for unknown names."""
        level = str(self.data.get("log_level") or DEFAULT_LOG_LEVEL).strip().lower()
        if level not in LOG_LEVELS:
            return DEFAULT_LOG_LEVEL
        return level

    @property
    def log_format(self) -> str:
        return self.data.get("log_format") or DEFAULT_LOG_FORMAT

    @property
    def issuer(self) -> str:
        """Externally visible base URL used in OAuth metadata.

        An explicit issuer is returned untouched. Otherwise it is derived
        from the bind address, with wildcard addresses mapped to localhost.
        """
        explicit = self.data.get("issuer")
        if explicit:
            return explicit

        host = self.host
        if host in WILDCARD_HOSTS:
            host = "localhost"
        elif ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.port}"

    def requires_auth(self) -> bool:
        """Check if an API key is configured for the MCP endpoint."""
        return self.api_key is not None

    def with_overrides(self, **overrides) -> "Config":
        """Return a copy with the non-None overrides applied."""
        data = dict(self.data)
        data.update({key: value for key, value in overrides.items() if value is not None})
        return Config(data)


def load_config() -> Config:
    """Load config from MCP_* environment variables."""
    return Config({
        "host": os.getenv("MCP_HOST", DEFAULT_HOST),
        "port": os.getenv("MCP_PORT", str(DEFAULT_PORT)),
        "api_key": os.getenv("MCP_API_KEY"),
        "log_level": os.getenv("MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        "log_format": os.getenv("MCP_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        "issuer": os.getenv("MCP_ISSUER"),
    })
