"""Configuration for the trust-bundle injection.

Values come from the environment (with defaults) and may be overridden by an
optional YAML file. The result is an immutable :class:`InjectorConfig` that is
built once at start-up and passed into every patch builder call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_BUNDLE_SOURCE_NAME = "trust-bundle"
DEFAULT_BUNDLE_KEY = "trust-bundle.pem"
DEFAULT_CERT_FILE_NAME = "ca-certificates.crt"

DEFAULT_TLS_CERT_FILE = "./ssl/kubetrust.pem"
DEFAULT_TLS_KEY_FILE = "./ssl/kubetrust.key"
DEFAULT_PORT = 8443

_ENV_KEYS = {
    "bundle_source_name": ("CA_CONFIGMAP_NAME", DEFAULT_BUNDLE_SOURCE_NAME),
    "bundle_key": ("CA_CONFIGMAP_KEY", DEFAULT_BUNDLE_KEY),
    "cert_file_name": ("CA_CERT_FILENAME", DEFAULT_CERT_FILE_NAME),
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""


def env_or_default(key: str, default: str, environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    value = env.get(key)
    if value:
        return value
    return default


@dataclass(frozen=True)
class InjectorConfig:
    bundle_source_name: str = DEFAULT_BUNDLE_SOURCE_NAME
    bundle_key: str = DEFAULT_BUNDLE_KEY
    cert_file_name: str = DEFAULT_CERT_FILE_NAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "InjectorConfig":
        values = {
            name: env_or_default(env_key, default, environ)
            for name, (env_key, default) in _ENV_KEYS.items()
        }
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any]) -> "InjectorConfig":
        """Return a copy with ``overrides`` applied, validating keys and types."""

        known = {field.name for field in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}")
        values: Dict[str, str] = {name: getattr(self, name) for name in known}
        for name, value in overrides.items():
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{name} must be a non-empty string")
            values[name] = value
        return InjectorConfig(**values)

    def to_dict(self) -> Dict[str, str]:
        return {
            "bundle_source_name": self.bundle_source_name,
            "bundle_key": self.bundle_key,
            "cert_file_name": self.cert_file_name,
        }


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> InjectorConfig:
    """Build the injector configuration from the environment and an optional YAML file."""

    config = InjectorConfig.from_env(environ)
    if path is None:
        return config
    try:
        raw_text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read config file {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        return config
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return config.merged(data)


__all__ = [
    "ConfigError",
    "DEFAULT_BUNDLE_KEY",
    "DEFAULT_BUNDLE_SOURCE_NAME",
    "DEFAULT_CERT_FILE_NAME",
    "DEFAULT_PORT",
    "DEFAULT_TLS_CERT_FILE",
    "DEFAULT_TLS_KEY_FILE",
    "InjectorConfig",
    "env_or_default",
    "load_config",
]
