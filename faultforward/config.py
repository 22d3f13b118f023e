"""
Config system - capture settings with layered loading.

Merge order (later overrides earlier):
1. Defaults
2. Config file (YAML or JSON)
3. Environment variables (FF_* prefix)
4. Manual overrides
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_CAPTURE_LIMIT = 1 << 16


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass(frozen=True)
class CaptureConfig:
    """
    Settings for fault capture.

    Attributes:
        capture_limit: Maximum size of a stack dump, in bytes
        all_units: Dump every running thread, not just the faulting one
        include_tasks: Dump other asyncio tasks of the faulting thread's loop
    """
    capture_limit: int = DEFAULT_CAPTURE_LIMIT
    all_units: bool = True
    include_tasks: bool = True

    def __post_init__(self):
        if isinstance(self.capture_limit, bool) or not isinstance(self.capture_limit, int):
            raise ConfigError(f"capture_limit must be an integer, got {self.capture_limit!r}")
        if self.capture_limit <= 0:
            raise ConfigError(f"capture_limit must be positive, got {self.capture_limit}")
        for name in ("all_units", "include_tasks"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be a boolean, got {getattr(self, name)!r}")

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        env_prefix: str = "FF_",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> CaptureConfig:
        """
        Load configuration from file, environment and overrides.

        Args:
            path: YAML or JSON file (optional)
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence)

        Returns:
            Validated CaptureConfig
        """
        data: Dict[str, Any] = {}

        if path:
            data.update(_load_file(Path(path)))

        data.update(_load_env(env_prefix, cls))

        if overrides:
            data.update(overrides)

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown capture settings: {', '.join(unknown)}")

        return cls(**data)

    def with_overrides(self, **changes: Any) -> CaptureConfig:
        return replace(self, **changes)


def _load_file(path: Path) -> Dict[str, Any]:
    """Load config from YAML or JSON file."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path) as f:
        if path.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _load_env(prefix: str, config_class: type) -> Dict[str, Any]:
    """Convert FF_CAPTURE_LIMIT=1024 to {"capture_limit": 1024}."""
    known = {f.name for f in fields(config_class)}
    int_fields = {
        f.name for f in fields(config_class)
        if isinstance(f.default, int) and not isinstance(f.default, bool)
    }

    data = {}
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        if name not in known:
            continue
        if name in int_fields:
            # "1" would otherwise parse as a boolean
            try:
                data[name] = int(value)
            except ValueError:
                raise ConfigError(f"{key} must be an integer, got {value!r}") from None
        else:
            data[name] = _parse_value(value)
    return data


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    # Boolean
    if value.lower() in ("true", "yes", "1"):
        return True
    if value.lower() in ("false", "no", "0"):
        return False

    # Number
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    # JSON
    if value.startswith(("{", "[")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value


# ============================================================================
# Process default
# ============================================================================

_default_config: Optional[CaptureConfig] = None


def get_config() -> CaptureConfig:
    """
    Get or load the process-wide capture configuration.

    Returns:
        CaptureConfig loaded from FF_* environment variables
    """
    global _default_config
    if _default_config is None:
        _default_config = CaptureConfig.load()
    return _default_config


def set_config(config: Optional[CaptureConfig]):
    """Replace the process-wide configuration (None reloads lazily)."""
    global _default_config
    _default_config = config
