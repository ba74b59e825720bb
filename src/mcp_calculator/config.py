"""Server configuration loader.

Loads server settings from a YAML file. Every setting has a default, so
the server also runs without a configuration file.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from mcp_calculator.protocol.jsonrpc import MAX_MESSAGE_SIZE
from mcp_calculator.protocol.lifecycle import SERVER_NAME, SERVER_VERSION
from mcp_calculator.protocol.session import DEFAULT_ENDPOINT_PATH, DEFAULT_KEEPALIVE_INTERVAL

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def expand_env_vars(value: str) -> str:
    """Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Unknown variables are left unchanged.

    Args:
        value: String potentially containing environment variable references.

    Returns:
        String with known environment variables expanded.
    """
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        return env_value if env_value is not None else match.group(0)

    return pattern.sub(replacer, value)


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigLoadError(f"'{name}' must be a mapping")
    return value


def _number(section: dict[str, Any], key: str, default: float, *, minimum: float = 0) -> float:
    value = section.get(key, default)
    if isinstance(value, str):
        value = expand_env_vars(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigLoadError(f"'{key}' must be a number, got {value!r}") from None
    if number < minimum:
        raise ConfigLoadError(f"'{key}' must be >= {minimum}, got {number}")
    return number


def _integer(section: dict[str, Any], key: str, default: int, *, minimum: int = 0) -> int:
    number = _number(section, key, default, minimum=minimum)
    if not number.is_integer():
        raise ConfigLoadError(f"'{key}' must be a whole number, got {number}")
    return int(number)


def _string(section: dict[str, Any], key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str):
        raise ConfigLoadError(f"'{key}' must be a string")
    return expand_env_vars(value)


@dataclass
class ServerConfig:
    """Server configuration.

    Populated from the YAML file once at start-up and not changed afterwards.
    """

    version: str = "1.0"

    # Server identity and listener
    name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    host: str = "127.0.0.1"
    port: int = 3000

    # Protocol settings
    max_message_size: int = MAX_MESSAGE_SIZE

    # Streaming session settings
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL
    idle_timeout: float = 0
    endpoint_path: str = DEFAULT_ENDPOINT_PATH

    # CORS
    cors_allow_origins: list[str] = field(default_factory=lambda: ["*"])

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "console"

    # Audit settings
    audit_log_file: str = ""

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> ServerConfig:
        """Create a ServerConfig from a configuration dictionary.

        Args:
            config: Dictionary parsed from YAML configuration.

        Returns:
            ServerConfig instance with all settings populated.

        Raises:
            ConfigLoadError: If a value has the wrong type or range.
        """
        server = _section(config, "server")
        protocol = _section(config, "protocol")
        sessions = _section(config, "sessions")
        cors = _section(config, "cors")
        logging_cfg = _section(config, "logging")
        audit = _section(config, "audit")

        port = _integer(server, "port", 3000, minimum=1)
        if port > 65535:
            raise ConfigLoadError(f"'port' must be <= 65535, got {port}")

        keepalive = _number(sessions, "keepalive_interval", DEFAULT_KEEPALIVE_INTERVAL)
        if keepalive <= 0:
            raise ConfigLoadError("'keepalive_interval' must be positive")

        log_level = _string(logging_cfg, "level", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigLoadError(f"'level' must be one of {', '.join(LOG_LEVELS)}")
        log_format = _string(logging_cfg, "format", "console").lower()
        if log_format not in LOG_FORMATS:
            raise ConfigLoadError(f"'format' must be one of {', '.join(LOG_FORMATS)}")

        origins = cors.get("allow_origins", ["*"])
        if not isinstance(origins, list) or not all(isinstance(o, str) for o in origins):
            raise ConfigLoadError("'allow_origins' must be a list of strings")

        endpoint_path = _string(sessions, "endpoint_path", DEFAULT_ENDPOINT_PATH)
        if not endpoint_path.startswith("/"):
            raise ConfigLoadError("'endpoint_path' must start with '/'")

        return cls(
            version=str(config.get("version", "1.0")),
            name=_string(server, "name", SERVER_NAME),
            server_version=_string(server, "version", SERVER_VERSION),
            host=_string(server, "host", "127.0.0.1"),
            port=port,
            max_message_size=_integer(protocol, "max_message_size", MAX_MESSAGE_SIZE, minimum=1),
            keepalive_interval=keepalive,
            idle_timeout=_number(sessions, "idle_timeout", 0),
            endpoint_path=endpoint_path,
            cors_allow_origins=[expand_env_vars(o) for o in origins],
            log_level=log_level,
            log_format=log_format,
            audit_log_file=_string(audit, "log_file", ""),
        )


def load_config(path: Path | None = None) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the YAML file, or None for the defaults.

    Returns:
        ServerConfig instance.

    Raises:
        ConfigLoadError: If the file cannot be found, parsed, or validated.
    """
    if path is None:
        return ServerConfig()

    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse config YAML: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Config must be a YAML mapping")

    if "version" not in config:
        raise ConfigLoadError("Config must include 'version' field")

    return ServerConfig.from_dict(config)
