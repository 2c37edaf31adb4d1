"""Configuration helpers for body-timeline.

Configuration is sourced from (in order of precedence):

1. Explicit overrides provided to :func:`get_config` (command line flags).
2. Environment variables prefixed with ``BODYTIMELINE_``.
3. A YAML file passed explicitly, or ``bodytimeline.yaml`` located in
   ``$BODYTIMELINE_CONFIG_DIR`` or ``./config/``.
4. Built-in defaults.

Missing configuration files simply result in the defaults being used.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

ENV_PREFIX = "BODYTIMELINE_"
CONFIG_DIR_ENV = "BODYTIMELINE_CONFIG_DIR"
CONFIG_FILENAME = "bodytimeline.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "log_level": "WARNING",
    "log_file": None,
    "timezone": "UTC",
    "short_sid": False,
    "error_log_suffix": ".errors.log",
    "encoding": "utf-8",
    "confirm_overwrite": True,
}


def load_yaml(path: Optional[Path]) -> dict[str, Any]:
    """Safely load YAML configuration from ``path``.

    The function returns an empty dictionary when the file does not exist
    or is empty. Parsing errors are surfaced to aid debugging.
    """

    if not path or not path.exists():
        return {}

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, Mapping):
        raise TypeError(f"Config file must contain a mapping: {path}")

    return dict(data)


def merge_dicts(*dicts: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge mappings with later dictionaries taking precedence."""

    merged: dict[str, Any] = {}

    for current in dicts:
        for key, value in current.items():
            if (
                key in merged
                and isinstance(merged[key], MutableMapping)
                and isinstance(value, Mapping)
            ):
                merged[key] = merge_dicts(merged[key], value)  # type: ignore[arg-type]
            else:
                merged[key] = value

    return merged


def _load_env_config(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Load configuration overrides from environment variables."""

    env_config: dict[str, Any] = {}
    prefix_len = len(prefix)

    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == CONFIG_DIR_ENV:
            continue
        config_key = key[prefix_len:].lower()
        env_config[config_key] = _coerce_env_value(value)

    return env_config


def _coerce_env_value(value: str) -> Any:
    """Attempt to cast environment variable values to richer types."""

    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"

    if lowered.isdigit():
        return int(lowered)

    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class TimelineConfig:
    """Strongly typed configuration representation."""

    log_level: str = DEFAULT_CONFIG["log_level"]
    log_file: Optional[str] = DEFAULT_CONFIG["log_file"]
    timezone: str = DEFAULT_CONFIG["timezone"]
    short_sid: bool = DEFAULT_CONFIG["short_sid"]
    error_log_suffix: str = DEFAULT_CONFIG["error_log_suffix"]
    encoding: str = DEFAULT_CONFIG["encoding"]
    confirm_overwrite: bool = DEFAULT_CONFIG["confirm_overwrite"]
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        data = {
            "log_level": self.log_level,
            "log_file": self.log_file,
            "timezone": self.timezone,
            "short_sid": self.short_sid,
            "error_log_suffix": self.error_log_suffix,
            "encoding": self.encoding,
            "confirm_overwrite": self.confirm_overwrite,
        }
        data.update(self.extra)
        return data

    def error_log_path(self, output: Path) -> Path:
        """Return the side log location for the body file ``output``."""

        return output.with_name(output.name + self.error_log_suffix)


def get_config(
    config_file: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> TimelineConfig:
    """Load configuration.

    Args:
        config_file: Optional YAML file; when omitted the default locations
            are searched.
        overrides: Explicit overrides that take highest precedence. ``None``
            values are ignored so unset command line flags do not mask
            lower precedence sources.

    Returns:
        A :class:`TimelineConfig` instance.
    """

    yaml_config = load_yaml(config_file or _resolve_config_file())
    env_config = _load_env_config()
    explicit_overrides = {
        key: value for key, value in dict(overrides or {}).items() if value is not None
    }

    merged = merge_dicts(DEFAULT_CONFIG, yaml_config, env_config, explicit_overrides)

    extra = {k: v for k, v in merged.items() if k not in DEFAULT_CONFIG}

    return TimelineConfig(
        log_level=str(merged["log_level"]).upper(),
        log_file=str(merged["log_file"]) if merged["log_file"] else None,
        timezone=str(merged["timezone"]),
        short_sid=_as_bool(merged["short_sid"]),
        error_log_suffix=str(merged["error_log_suffix"]),
        encoding=str(merged["encoding"]),
        confirm_overwrite=_as_bool(merged["confirm_overwrite"]),
        extra=extra,
    )


def _resolve_config_file() -> Optional[Path]:
    """Determine the configuration file to use when none was given."""

    env_root = os.environ.get(CONFIG_DIR_ENV)
    if env_root:
        candidate = Path(env_root).expanduser() / CONFIG_FILENAME
        if candidate.exists():
            return candidate

    default = Path.cwd() / "config" / CONFIG_FILENAME
    if default.exists():
        return default

    return None


__all__ = [
    "DEFAULT_CONFIG",
    "TimelineConfig",
    "get_config",
    "load_yaml",
    "merge_dicts",
]
