from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (default: config/alchemist.yml)
- Validate against config_schema.json (unknown keys rejected)
- Apply defaults (active=tasks, duplicate_id_scope=shared, ./logs, ./exports)
"""

__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "default_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/alchemist.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    sources: dict[str, str] = field(default_factory=dict)  # kind -> file path
    active: str = "tasks"
    duplicate_id_scope: str = "shared"  # shared|column
    null_sentinels: tuple[str, ...] = ()
    logs_directory: str = "./logs"
    export_directory: str = "./exports"

    def with_overrides(self, *, sources: dict[str, str] | None = None, active: str | None = None) -> AppConfig:
        """Return a copy with CLI-provided values layered on top."""
        merged = dict(self.sources)
        if sources:
            merged.update({k: v for k, v in sources.items() if v})
        return replace(self, sources=merged, active=active or self.active)


def default_config() -> AppConfig:
    return AppConfig()


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: if the schema file is missing or invalid, or the data
            violates it (unknown keys, wrong types, bad enum values).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = default_config()
    return AppConfig(
        sources=dict(data.get("sources") or {}),
        active=data.get("active", defaults.active),
        duplicate_id_scope=data.get("duplicate_id_scope", defaults.duplicate_id_scope),
        null_sentinels=tuple(data.get("null_sentinels") or ()),
        logs_directory=data.get("logs_directory", defaults.logs_directory),
        export_directory=data.get("export_directory", defaults.export_directory),
    )
