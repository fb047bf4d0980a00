"""Configuration management."""

from .manager import ConfigManager, ComparisonConfig, ConfigError

__all__ = ["ConfigManager", "ComparisonConfig", "ConfigError"]
