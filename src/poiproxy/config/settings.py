# src/poiproxy/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/poiproxy/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `POIPROXY_CONFIG_PATH` (replaces the packaged defaults)
- a small whitelist of environment variables (e.g., `POIPROXY_ENCRYPTION_KEY`)

Design rule:
- Tuning knobs (privacy zone, candidate caps, timeouts) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from poiproxy.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `poiproxy.config`."""
    text = resources.files("poiproxy.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "poiproxy"
    log_level: str = "INFO"
    http_timeout_seconds: float = 10


class PrivacySettings(BaseModel):
    # Half-width of the uniform offset interval, in degrees (0.01 deg of latitude ~ 1.1 km).
    zone_half_width_deg: float = Field(0.01, gt=0, le=1)
    correct_longitude: bool = False


class SyntheticSettings(BaseModel):
    per_km: float = Field(3, gt=0)
    max_candidates: int = Field(20, ge=1)


class CandidateSettings(BaseModel):
    source: Literal["synthetic", "catalog"] = "synthetic"
    synthetic: SyntheticSettings = Field(default_factory=SyntheticSettings)


class RemoteCatalogSettings(BaseModel):
    base_url: str | None = None
    table: str = "points_of_interest"
    api_key: str | None = None


class CatalogSettings(BaseModel):
    backend: Literal["file", "remote"] = "file"
    path: str = "data/catalogs/pois.json"
    lookup_timeout_seconds: float = Field(5, gt=0)
    remote: RemoteCatalogSettings = Field(default_factory=RemoteCatalogSettings)


class EncryptionSettings(BaseModel):
    provider: Literal["none", "fernet"] = "none"
    key: str | None = None


class ApiSettings(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    candidates: CandidateSettings = Field(default_factory=CandidateSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    encryption: EncryptionSettings = Field(default_factory=EncryptionSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


# env var -> dotted settings path
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "POIPROXY_LOG_LEVEL": ("app", "log_level"),
    "POIPROXY_CANDIDATE_SOURCE": ("candidates", "source"),
    "POIPROXY_CATALOG_BACKEND": ("catalog", "backend"),
    "POIPROXY_CATALOG_PATH": ("catalog", "path"),
    "POIPROXY_CATALOG_REMOTE_URL": ("catalog", "remote", "base_url"),
    "POIPROXY_CATALOG_REMOTE_API_KEY": ("catalog", "remote", "api_key"),
    "POIPROXY_ENCRYPTION_PROVIDER": ("encryption", "provider"),
    "POIPROXY_ENCRYPTION_KEY": ("encryption", "key"),
}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)
    for env_name, path in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        node = data
        for key in path[:-1]:
            node = node.setdefault(key, {})
        node[path[-1]] = value
    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("POIPROXY_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
