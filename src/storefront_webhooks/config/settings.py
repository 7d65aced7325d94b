"""
Configuration management for Storefront Webhooks.

Handles loading, validation, and management of configuration
from files and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LOG_PATH = "~/.storefront-webhooks/deliveries.json"


def _resolve_env(value: Optional[str], default_env: str) -> Optional[str]:
    """Resolve ``${VAR}`` placeholders, falling back to ``default_env`` when unset."""
    if value is None:
        return os.getenv(default_env)
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1])
    return value


class StoreConfig(BaseModel):
    """Connection to the storefront REST API that owns subscriptions."""

    store_url: Optional[str] = Field(
        default=None, validate_default=True, description="Storefront base URL"
    )
    consumer_key: Optional[str] = Field(
        default=None, validate_default=True, description="REST API consumer key"
    )
    consumer_secret: Optional[str] = Field(
        default=None, validate_default=True, description="REST API consumer secret"
    )
    api_version: str = Field(default="v3", description="REST API version segment")
    timeout_seconds: float = Field(default=5.0, gt=0, description="Request timeout")

    @field_validator("store_url", mode="before")
    @classmethod
    def resolve_store_url(cls, v: Optional[str]) -> Optional[str]:
        """Resolve store URL from environment variable if needed."""
        resolved = _resolve_env(v, "STOREFRONT_URL")
        return resolved.rstrip("/") if resolved else resolved

    @field_validator("consumer_key", mode="before")
    @classmethod
    def resolve_consumer_key(cls, v: Optional[str]) -> Optional[str]:
        """Resolve consumer key from environment variable if needed."""
        return _resolve_env(v, "STOREFRONT_CONSUMER_KEY")

    @field_validator("consumer_secret", mode="before")
    @classmethod
    def resolve_consumer_secret(cls, v: Optional[str]) -> Optional[str]:
        """Resolve consumer secret from environment variable if needed."""
        return _resolve_env(v, "STOREFRONT_CONSUMER_SECRET")

    @property
    def is_configured(self) -> bool:
        return bool(self.store_url and self.consumer_key and self.consumer_secret)


class DeliveryConfig(BaseModel):
    """Configuration for test deliveries."""

    timeout_seconds: float = Field(default=10.0, gt=0, description="Delivery request timeout")
    response_message_limit: int = Field(
        default=500, ge=1, description="Max characters of response text kept per log entry"
    )
    user_agent: str = Field(default="Storefront-Webhooks/0.1", description="User-Agent header")


class DeliveryLogConfig(BaseModel):
    """Configuration for the delivery log."""

    path: Optional[str] = Field(
        default=DEFAULT_LOG_PATH, description="JSON file for the log (memory-only if null)"
    )
    max_entries: int = Field(default=1000, ge=1, description="Retention cap")


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    log_level: str = Field(default="INFO", description="Logging level")
    json_output: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


class Config(BaseModel):
    """Main configuration object."""

    model_config = ConfigDict(extra="forbid")

    version: str = Field(default="0.1.0", description="Configuration version")
    store: StoreConfig = Field(default_factory=StoreConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    delivery_log: DeliveryLogConfig = Field(default_factory=DeliveryLogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to configuration file. If None, looks for
                    STOREFRONT_WEBHOOKS_CONFIG environment variable.

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        pydantic.ValidationError: If configuration is invalid
    """
    if config_path is None:
        env_path = os.getenv("STOREFRONT_WEBHOOKS_CONFIG")
        if env_path:
            config_path = Path(env_path)

    config_data: Dict[str, Any] = {}
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            config_data = json.load(f)
    elif config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    env_overrides: Dict[str, Any] = {}

    log_level = os.getenv("STOREFRONT_WEBHOOKS_LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("logging", {})["log_level"] = log_level

    log_path = os.getenv("STOREFRONT_WEBHOOKS_LOG_PATH")
    if log_path:
        env_overrides.setdefault("delivery_log", {})["path"] = log_path

    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)

    return Config(**config_data)


def create_default_config(config_path: Path) -> None:
    """
    Create a default configuration file.

    Args:
        config_path: Path where to create the configuration file
    """
    default_config = {
        "version": "0.1.0",
        "store": {
            "store_url": "${STOREFRONT_URL}",
            "consumer_key": "${STOREFRONT_CONSUMER_KEY}",
            "consumer_secret": "${STOREFRONT_CONSUMER_SECRET}",
            "api_version": "v3",
            "timeout_seconds": 5.0,
        },
        "delivery": {
            "timeout_seconds": 10.0,
            "response_message_limit": 500,
            "user_agent": "Storefront-Webhooks/0.1",
        },
        "delivery_log": {
            "path": DEFAULT_LOG_PATH,
            "max_entries": 1000,
        },
        "logging": {
            "log_level": "INFO",
            "json_output": True,
        },
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(default_config, f, indent=2)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
