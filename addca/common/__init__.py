"""Shared configuration helpers."""

from .config import ConfigError, InjectorConfig, load_config

__all__ = ["ConfigError", "InjectorConfig", "load_config"]
