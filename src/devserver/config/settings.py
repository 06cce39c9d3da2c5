"""Configuration management for devserver.

Loads settings from an optional YAML configuration file with environment
variable overrides. Supports .env files and the unprefixed ``PORT``
variable that hosting platforms set for the listening port.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/devserver.yaml")
DEFAULT_PORT = 80


class ServerConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    template_path: Path = Field(
        default=Path("index.html"),
        description="HTML template, resolved against the working directory",
    )
    welcome_message: str = Field(default="Not Welcome - Develop Server", min_length=1)
    redirect_url: str = Field(default="https://www.example.com")
    probe_host: str = Field(
        default="8.8.8.8",
        description="Public address used to find the outbound interface",
    )
    probe_port: int = Field(default=80, ge=1, le=65535)
    max_exec_time: float = Field(default=120.0, gt=0, description="Seconds")
    check_origin: bool = Field(
        default=True,
        description="Reject WebSocket upgrades whose Origin host differs from Host",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for devserver.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "DEVSERVER_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: PORT env var > YAML file > prefixed env vars / .env > defaults

    Raises:
        pydantic.ValidationError: If any value (``PORT`` included) is invalid.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.debug("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Load .env file into os.environ if it exists."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Apply the unprefixed PORT variable on top of the YAML data."""
    logger.info("Trying get port from environment...")
    port = os.environ.get("PORT", "").strip()
    if not port:
        server = yaml_data.get("server")
        configured = server.get("port") if isinstance(server, dict) else None
        if configured is None and not os.environ.get("DEVSERVER_SERVER__PORT"):
            logger.info("Defaulting to port %s", DEFAULT_PORT)
        return

    if not isinstance(yaml_data.get("server"), dict):
        yaml_data["server"] = {}
    yaml_data["server"]["port"] = port
