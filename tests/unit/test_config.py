"""
Unit tests for configuration loading.
"""

import json

import pytest
from pydantic import ValidationError

from storefront_webhooks.config.settings import (
    Config,
    StoreConfig,
    _deep_merge,
    create_default_config,
    load_config,
)

STORE_ENV = ("STOREFRONT_URL", "STOREFRONT_CONSUMER_KEY", "STOREFRONT_CONSUMER_SECRET")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in STORE_ENV + (
        "STOREFRONT_WEBHOOKS_CONFIG",
        "STOREFRONT_WEBHOOKS_LOG_LEVEL",
        "STOREFRONT_WEBHOOKS_LOG_PATH",
    ):
        monkeypatch.delenv(var, raising=False)


class TestStoreConfig:
    """Test store connection settings."""

    def test_defaults_read_environment(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_URL", "https://shop.example.com/")
        monkeypatch.setenv("STOREFRONT_CONSUMER_KEY", "ck_env")
        monkeypatch.setenv("STOREFRONT_CONSUMER_SECRET", "cs_env")

        config = StoreConfig()

        assert config.store_url == "https://shop.example.com"
        assert config.consumer_key == "ck_env"
        assert config.is_configured

    def test_placeholder_resolution(self, monkeypatch):
        monkeypatch.setenv("MY_SHOP", "https://other.example.com")

        config = StoreConfig(store_url="${MY_SHOP}", consumer_key="ck", consumer_secret="cs")

        assert config.store_url == "https://other.example.com"

    def test_unconfigured(self):
        config = StoreConfig()

        assert config.store_url is None
        assert not config.is_configured

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            StoreConfig(timeout_seconds=0)


class TestConfig:
    """Test the root configuration model."""

    def test_defaults(self):
        config = Config()

        assert config.delivery.timeout_seconds == 10.0
        assert config.delivery.response_message_limit == 500
        assert config.delivery_log.max_entries == 1000
        assert config.logging.log_level == "INFO"

    def test_log_level_normalized(self):
        config = Config(logging={"log_level": "debug"})
        assert config.logging.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Config(logging={"log_level": "LOUD"})

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            Config(retries={"max": 3})


class TestLoadConfig:
    """Test loading configuration from files and environment."""

    def test_no_file(self):
        assert load_config().delivery_log.max_entries == 1000

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.json")

    def test_file_and_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "delivery": {"timeout_seconds": 3},
                    "delivery_log": {"path": "/tmp/original.json", "max_entries": 10},
                }
            )
        )
        monkeypatch.setenv("STOREFRONT_WEBHOOKS_CONFIG", str(path))
        monkeypatch.setenv("STOREFRONT_WEBHOOKS_LOG_LEVEL", "warning")
        monkeypatch.setenv("STOREFRONT_WEBHOOKS_LOG_PATH", str(tmp_path / "log.json"))

        config = load_config()

        assert config.delivery.timeout_seconds == 3
        assert config.delivery_log.path == str(tmp_path / "log.json")
        assert config.delivery_log.max_entries == 10
        assert config.logging.log_level == "WARNING"

    def test_default_file_round_trip(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STOREFRONT_URL", "https://shop.example.com")
        monkeypatch.setenv("STOREFRONT_CONSUMER_KEY", "ck")
        monkeypatch.setenv("STOREFRONT_CONSUMER_SECRET", "cs")
        path = tmp_path / "nested" / "config.json"

        create_default_config(path)
        config = load_config(path)

        assert config.store.store_url == "https://shop.example.com"
        assert config.store.is_configured


def test_deep_merge():
    base = {"a": {"x": 1, "y": 2}, "b": 1}

    merged = _deep_merge(base, {"a": {"y": 3}, "c": 4})

    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base["a"]["y"] == 2
