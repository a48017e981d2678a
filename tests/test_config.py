"""Tests for configuration loading."""

import pytest

from shared.config import (
    DEFAULT_MARKDOWN_TIERS,
    AppConfig,
    ExpiryWarningConfig,
    MarkdownConfig,
    get_config,
    reload_config,
)


def test_config_loads_base_config():
    """Test that base configuration loads correctly."""
    config = AppConfig.load(env="dev")
    assert config.environment == "dev"
    assert len(config.pricing.markdown.tiers) == 5
    assert config.pricing.expiry_warnings.critical_days == 30


def test_config_environment_override():
    """Test that environment-specific config overrides base config."""
    config = AppConfig.load(env="dev")
    # dev.yaml overrides logging format to "text"
    assert config.logging.format == "text"

    prod = AppConfig.load(env="prod")
    assert prod.logging.format == "json"


def test_env_var_override(monkeypatch):
    """Test that environment variables override YAML values."""
    monkeypatch.setenv("LOGGING__SERVICE_NAME", "pricing-test")
    config = AppConfig.load(env="dev")
    assert config.logging.service_name == "pricing-test"


def test_markdown_tiers_default():
    """Test the markdown tier table when the YAML files leave it out."""
    config = AppConfig.load()
    tiers = [(t.max_days_to_expiry, t.discount_percent) for t in config.pricing.markdown.tiers]
    assert tiers == [(3, 50.0), (7, 40.0), (14, 30.0), (21, 20.0), (30, 10.0)]


def test_markdown_tiers_built_from_default_table():
    """Test that the config default and the fixed default table are the same data."""
    tiers = [t.model_dump() for t in MarkdownConfig().tiers]
    assert tiers == DEFAULT_MARKDOWN_TIERS


def test_markdown_tiers_override():
    """Test that an explicit tier table replaces the default."""
    config = MarkdownConfig(tiers=[{"max_days_to_expiry": 5, "discount_percent": 25.0}])
    assert [(t.max_days_to_expiry, t.discount_percent) for t in config.tiers] == [(5, 25.0)]


def test_expiry_warning_bands_must_widen():
    """Test that misordered warning bands are rejected."""
    with pytest.raises(ValueError):
        ExpiryWarningConfig(critical_days=60, warning_days=30, notice_days=90)


def test_get_config_singleton():
    """Test that get_config returns a singleton."""
    config1 = get_config()
    config2 = get_config()
    assert config1 is config2


def test_reload_config():
    """Test that reload_config creates a new instance."""
    config1 = get_config()
    config2 = reload_config()
    assert isinstance(config2, AppConfig)
    assert config2 is not config1
