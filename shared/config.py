"""Configuration loading and management using pydantic-settings."""

import os
from pathlib import Path
from typing import Optional, List

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# (max_days_to_expiry, discount_percent), first matching bound wins
DEFAULT_MARKDOWN_TIERS: List[dict] = [
    {'max_days_to_expiry': 3, 'discount_percent': 50.0},
    {'max_days_to_expiry': 7, 'discount_percent': 40.0},
    {'max_days_to_expiry': 14, 'discount_percent': 30.0},
    {'max_days_to_expiry': 21, 'discount_percent': 20.0},
    {'max_days_to_expiry': 30, 'discount_percent': 10.0},
]


class MarkdownTier(BaseSettings):
    """Markdown discount tier: lots expiring within max_days_to_expiry get discount_percent."""

    max_days_to_expiry: int
    discount_percent: float

    model_config = SettingsConfigDict(extra="allow")


class MarkdownConfig(BaseSettings):
    """Expiry markdown suggester configuration."""

    tiers: list[MarkdownTier] = Field(
        default_factory=lambda: [MarkdownTier(**tier) for tier in DEFAULT_MARKDOWN_TIERS]
    )

    model_config = SettingsConfigDict(extra="allow")


class ExpiryWarningConfig(BaseSettings):
    """Day bands used to group expiring stock lots."""

    critical_days: int = 30
    warning_days: int = 60
    notice_days: int = 90

    model_config = SettingsConfigDict(extra="allow")

    @field_validator('notice_days')
    @classmethod
    def validate_band_order(cls, v: int, info) -> int:
        """Bands must widen: critical <= warning <= notice."""
        critical = info.data.get('critical_days', 0)
        warning = info.data.get('warning_days', 0)
        if not critical <= warning <= v:
            raise ValueError(
                "expiry warning bands must satisfy critical_days <= warning_days <= notice_days"
            )
        return v


class PricingConfig(BaseSettings):
    """Pricing configuration."""

    markdown: MarkdownConfig = Field(default_factory=MarkdownConfig)
    expiry_warnings: ExpiryWarningConfig = Field(default_factory=ExpiryWarningConfig)

    model_config = SettingsConfigDict(extra="allow")


class APIConfig(BaseSettings):
    """API configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    version: str = "v1"
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173"
        ]
    )
    evaluate_rate_limit: str = "120/minute"
    markdown_rate_limit: str = "30/minute"

    model_config = SettingsConfigDict(extra="allow")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"  # "json" or "text"
    service_name: str = "pricing-engine"

    model_config = SettingsConfigDict(extra="allow")


class AppConfig(BaseSettings):
    """Main application configuration."""

    environment: str = Field(default="dev", alias="ENVIRONMENT")
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # YAML values arrive as init kwargs; environment variables must win over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @classmethod
    def load(cls, env: Optional[str] = None) -> "AppConfig":
        """
        Load configuration from YAML files and environment variables.

        Configuration hierarchy (highest priority first):
        1. Environment variables
        2. {env}.yaml (e.g., dev.yaml, prod.yaml)
        3. config.yaml (base config)

        Args:
            env: Environment name (dev, staging, prod). If None, uses ENVIRONMENT env var.

        Returns:
            AppConfig instance with loaded configuration.
        """
        if env is None:
            env = os.getenv("ENVIRONMENT", "dev")

        config_dir = Path(__file__).parent.parent / "config"

        base_config = _read_yaml(config_dir / "config.yaml")
        env_config = _read_yaml(config_dir / f"{env}.yaml")

        # env config overrides base config
        merged_config = _deep_merge(base_config, env_config)

        return cls(**merged_config, environment=env)


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# Global config instance (lazy loaded)
_config: Optional[AppConfig] = None


def get_config(env: Optional[str] = None) -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.load(env)
    return _config


def reload_config(env: Optional[str] = None) -> AppConfig:
    """Reload the global configuration."""
    global _config
    _config = AppConfig.load(env)
    return _config
