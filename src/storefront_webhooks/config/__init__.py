"""Configuration management."""

from .settings import Config, create_default_config, load_config

__all__ = ["Config", "load_config", "create_default_config"]
