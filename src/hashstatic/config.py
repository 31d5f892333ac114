"""config.py - configuration management.

layered config: defaults -> project (.hashstatic.json) -> environment.
covers where the assets live, where to listen, and how long clients
may cache verified responses.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path


_PROJECT_CONFIG_NAME = ".hashstatic.json"


# ============================================================
# DEFAULTS
# ============================================================

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"

DEFAULTS = {
    "root": "static",
    "host": "127.0.0.1",
    "port": 8080,
    "cache_control": IMMUTABLE_CACHE_CONTROL,
    "log_level": "info",
    "workers": 8,
}


@dataclass
class Config:
    """merged configuration from all layers."""
    values: dict = field(default_factory=dict)
    source: str = ""  # which layer provided the final values

    def get(self, key: str, default=None):
        return self.values.get(key, DEFAULTS.get(key, default))

    def __getitem__(self, key: str):
        return self.get(key)

    def __contains__(self, key: str):
        return key in self.values or key in DEFAULTS

    def to_dict(self) -> dict:
        merged = dict(DEFAULTS)
        merged.update(self.values)
        return merged


# ============================================================
# CONFIG LOADING
# ============================================================

def load_project(root: str = ".") -> dict:
    """load project config from .hashstatic.json in project root."""
    config_path = Path(root) / _PROJECT_CONFIG_NAME
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: str = ".") -> Config:
    """load merged config: defaults -> project -> env."""
    merged = dict(DEFAULTS)

    project_config = load_project(root)
    merged.update(project_config)

    env_overrides = _env_overrides()
    merged.update(env_overrides)

    source = "defaults"
    if env_overrides:
        source = "env"
    elif project_config:
        source = "project"

    return Config(values=merged, source=source)


def _env_overrides() -> dict:
    """extract config overrides from environment variables."""
    overrides = {}

    env_map = {
        "HASHSTATIC_ROOT": "root",
        "HASHSTATIC_HOST": "host",
        "HASHSTATIC_PORT": "port",
        "HASHSTATIC_CACHE_CONTROL": "cache_control",
        "HASHSTATIC_LOG_LEVEL": "log_level",
        "HASHSTATIC_WORKERS": "workers",
    }

    for env_key, config_key in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            if config_key in ("port", "workers"):
                try:
                    overrides[config_key] = int(value)
                except ValueError:
                    pass
            else:
                overrides[config_key] = value

    return overrides


def list_config(root: str = ".") -> dict:
    """list all config values with their sources."""
    project_config = load_project(root)
    env = _env_overrides()

    result = {}
    for key in DEFAULTS:
        source = "default"
        value = DEFAULTS[key]

        if key in project_config:
            source = "project"
            value = project_config[key]
        if key in env:
            source = "env"
            value = env[key]

        result[key] = {"value": value, "source": source}

    return result
