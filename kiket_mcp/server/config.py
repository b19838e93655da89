"""Startup configuration.

Settings are resolved once at startup with the precedence
CLI flag > environment variable > YAML file > default, and passed explicitly
to whatever needs them. Nothing reads the environment after this point.
"""

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..domain.exceptions import ConfigurationError
from ..domain.value_objects import RetryConfig

# =============================================================================
# Constants
# =============================================================================

TRANSPORTS = ("stdio", "websocket")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001
DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class ServerConfig:
    """Resolved server settings.

    Attributes:
        api_url: Root URL of the Kiket instance.
        api_key: API token (never logged).
        project_key: Default project for listIssues/createIssue.
        verify_ssl: Verify TLS certificates of the API.
        request_timeout_s: Per-request HTTP timeout.
        transport: ``stdio`` or ``websocket``.
        host: Bind address of the websocket transport.
        port: Port of the websocket transport.
        health_port: Port of the health server; None disables it.
        retry: Retry and backoff bounds.
        log_level: Root log level.
        json_logs: Render logs as JSON lines.
        log_file: Optional extra log file.
    """

    api_url: str
    api_key: str = field(repr=False)
    project_key: str | None = None
    verify_ssl: bool = True
    request_timeout_s: float = DEFAULT_TIMEOUT_SECONDS
    transport: str = "stdio"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    health_port: int | None = None
    retry: RetryConfig = field(default_factory=RetryConfig)
    log_level: str = "INFO"
    json_logs: bool = False
    log_file: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.api_url:
            raise ConfigurationError("KIKET_API_URL is required")
        if not self.api_key:
            raise ConfigurationError("KIKET_API_KEY is required")
        if self.transport not in TRANSPORTS:
            raise ConfigurationError(f"Unsupported transport '{self.transport}', expected one of {TRANSPORTS}")
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}")
        if self.health_port is not None and not 0 < self.health_port < 65536:
            raise ConfigurationError(f"Invalid health port: {self.health_port}")
        if self.request_timeout_s <= 0:
            raise ConfigurationError("Request timeout must be positive")


def load_config_from_file(config_path: str) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid configuration in {config_path}: expected a mapping")
    return data


def load_config(
    env: Mapping[str, str] | None = None,
    config_path: str | None = None,
    **overrides: Any,
) -> ServerConfig:
    """Resolve the server configuration.

    Args:
        env: Environment mapping (defaults to os.environ).
        config_path: Optional YAML file.
        **overrides: CLI values keyed by ServerConfig field name; None values are ignored.

    Raises:
        ConfigurationError: On missing required settings or unparsable values.
    """
    env = os.environ if env is None else env
    file_config = load_config_from_file(config_path) if config_path else {}

    api = _section(file_config, "api")
    server = _section(file_config, "server")
    retry = _section(file_config, "retry")
    logging_section = _section(file_config, "logging")

    def pick(name: str, env_key: str | None, yaml_section: Mapping[str, Any], yaml_key: str, default: Any) -> Any:
        if overrides.get(name) is not None:
            return overrides[name]
        if env_key and env.get(env_key) not in (None, ""):
            return env[env_key]
        if yaml_section.get(yaml_key) is not None:
            return yaml_section[yaml_key]
        return default

    health_port = pick("health_port", "HEALTH_PORT", server, "health_port", None)

    try:
        retry_config = RetryConfig(
            max_retries=_int(pick("max_retries", "KIKET_MAX_RETRIES", retry, "max_retries", 3), "max_retries"),
            base_delay_ms=_int(
                pick("base_delay_ms", "KIKET_RETRY_BASE_DELAY_MS", retry, "base_delay_ms", 1000), "base_delay_ms"
            ),
            max_delay_ms=_int(
                pick("max_delay_ms", "KIKET_RETRY_MAX_DELAY_MS", retry, "max_delay_ms", 30_000), "max_delay_ms"
            ),
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid retry configuration: {e}") from e

    return ServerConfig(
        api_url=str(pick("api_url", "KIKET_API_URL", api, "url", "") or ""),
        api_key=str(pick("api_key", "KIKET_API_KEY", api, "key", "") or ""),
        project_key=pick("project_key", "KIKET_PROJECT_KEY", api, "project_key", None),
        verify_ssl=_bool(pick("verify_ssl", "KIKET_VERIFY_SSL", api, "verify_ssl", True), "verify_ssl"),
        request_timeout_s=_float(
            pick("request_timeout_s", "KIKET_REQUEST_TIMEOUT", api, "timeout_s", DEFAULT_TIMEOUT_SECONDS),
            "request_timeout_s",
        ),
        transport=str(pick("transport", "MCP_TRANSPORT", server, "transport", "stdio")).lower(),
        host=str(pick("host", "MCP_HOST", server, "host", DEFAULT_HOST)),
        port=_int(pick("port", "MCP_PORT", server, "port", DEFAULT_PORT), "port"),
        health_port=None if health_port is None else _int(health_port, "health_port"),
        retry=retry_config,
        log_level=str(pick("log_level", "LOG_LEVEL", logging_section, "level", "INFO")).upper(),
        json_logs=_bool(pick("json_logs", "MCP_JSON_LOGS", logging_section, "json_format", False), "json_logs"),
        log_file=pick("log_file", None, logging_section, "file", None),
    )


def _section(config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return value


def _bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}") from e


def _float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid number for {name}: {value!r}") from e


__all__ = [
    "ServerConfig",
    "TRANSPORTS",
    "load_config",
    "load_config_from_file",
]
