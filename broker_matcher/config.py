"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``  committed defaults
  2. ``config/local.toml``    optional local overrides (gitignored)
  3. ``.env``                 loaded into the environment if present
  4. ``BROKER_MATCHER_*``     environment variables

Environment overrides:

  BROKER_MATCHER_CATALOG_PATH          catalog.path
  BROKER_MATCHER_DEBOUNCE_MS           filter.debounce_ms
  BROKER_MATCHER_RECOMMENDATION_LIMIT  filter.recommendation_limit
  BROKER_MATCHER_OUTPUT_DIR            output.dir
  BROKER_MATCHER_LOG_LEVEL             logging.level
  BROKER_MATCHER_LOG_JSON              logging.json_format
  BROKER_MATCHER_DEBUG                 debug

Entry point: ``load_config(config_path=None) -> AppConfig``. The CLI (or a
host application) builds ``BrokerFilterService.from_config(config, brokers)``;
library code never reads env vars directly.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class CatalogConfig(BaseModel):
    """Where the broker catalog is read from."""

    model_config = ConfigDict(frozen=True)

    path: str = "config/brokers/sample_brokers.json"


class FilterConfig(BaseModel):
    """Interactive filtering settings."""

    model_config = ConfigDict(frozen=True)

    debounce_ms: int = 500
    recommendation_limit: int = 10

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {v}.")
        return v

    @field_validator("recommendation_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"recommendation_limit must be >= 1, got {v}.")
        return v


class OutputConfig(BaseModel):
    """Report output location."""

    model_config = ConfigDict(frozen=True)

    dir: str = "data/outputs/recommendations"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False
    quiet_loggers: tuple[str, ...] = ("asyncio",)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    catalog: CatalogConfig = CatalogConfig()
    filter: FilterConfig = FilterConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

DEFAULT_CONFIG = Path("config") / "default.toml"
ENV_PREFIX = "BROKER_MATCHER_"

_SECTIONS = ("catalog", "filter", "output", "logging")

# Env var suffix -> (section, key); section "" is the top level. Values are
# passed through as strings and coerced by the pydantic models.
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CATALOG_PATH":         ("catalog", "path"),
    "DEBOUNCE_MS":          ("filter", "debounce_ms"),
    "RECOMMENDATION_LIMIT": ("filter", "recommendation_limit"),
    "OUTPUT_DIR":           ("output", "dir"),
    "LOG_LEVEL":            ("logging", "level"),
    "LOG_JSON":             ("logging", "json_format"),
    "DEBUG":                ("", "debug"),
}


def _project_root() -> Path:
    """First ancestor of this package that holds ``config/default.toml``."""
    for candidate in Path(__file__).resolve().parents:
        if (candidate / DEFAULT_CONFIG).exists():
            return candidate
    return Path.cwd()


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit TOML file. Defaults to
            ``<project_root>/config/default.toml``. A ``local.toml`` next to
            it is merged on top when present.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the TOML file does not exist.
        pydantic.ValidationError: If merged values fail validation, including
            malformed ``BROKER_MATCHER_*`` values.
    """
    root = _project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path else root / DEFAULT_CONFIG
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local_path = path.with_name("local.toml")
    if local_path.exists():
        raw = _deep_merge(raw, _read_toml(local_path))

    raw = _apply_env_overrides(raw, os.environ)
    return _build_app_config(raw)


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay ``BROKER_MATCHER_*`` variables from ``environ`` onto ``raw``.

    Empty values are ignored. See ``_ENV_OVERRIDES`` for the supported names.
    """
    overrides: dict[str, Any] = {}
    for suffix, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(ENV_PREFIX + suffix)
        if not value:
            continue
        if section:
            overrides.setdefault(section, {})[key] = value
        else:
            overrides[key] = value
    return _deep_merge(raw, overrides)


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map the merged TOML dict onto ``AppConfig``.

    ``debug`` may come from the top level (env override) or ``[project]``.
    """
    data: dict[str, Any] = {name: raw.get(name, {}) for name in _SECTIONS}
    data["debug"] = raw.get("debug", raw.get("project", {}).get("debug", False))
    return AppConfig.model_validate(data)
