"""Load board settings from an optional YAML file and the environment.

Environment variables win over the file, and the file wins over the
defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

DEFAULT_DATABASE_URL = ".kanban_board/tasks.yaml"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5001
DEFAULT_API_URL = "http://localhost:5001/api"
VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

# setting name -> environment variables, first match wins
ENV_VARS: dict[str, tuple[str, ...]] = {
    "database_url": ("KANBAN_DATABASE_URL", "DATABASE_URL"),
    "host": ("KANBAN_HOST",),
    "port": ("PORT",),
    "api_url": ("KANBAN_API_URL",),
    "cors_origins": ("KANBAN_CORS_ORIGINS",),
    "log_level": ("KANBAN_LOG_LEVEL",),
}


class ConfigError(ValueError):
    """A configuration source holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_url: str = DEFAULT_API_URL
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with the non-None *overrides* applied and validated."""
        given = {k: v for k, v in overrides.items() if v is not None}
        if not given:
            return self
        return _coerce(replace(self, **given))

    def to_environ(self) -> dict[str, str]:
        """Return the environment variables that reproduce these settings."""
        values = {
            "database_url": self.database_url,
            "host": self.host,
            "port": str(self.port),
            "api_url": self.api_url,
            "cors_origins": ",".join(self.cors_origins),
            "log_level": self.log_level,
        }
        return {ENV_VARS[name][0]: value for name, value in values.items()}


def _load_file(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"{path}: {exc.__class__.__name__}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: YAMLError: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected mapping, got {type(data).__name__}")
    unknown = set(data) - set(ENV_VARS)
    if unknown:
        raise ConfigError(f"{path}: unknown settings {sorted(unknown)}")
    return data


def _split_origins(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        items = raw.split(",")
    else:
        items = list(raw or [])
    origins = tuple(str(item).strip() for item in items if str(item).strip())
    return origins or ("*",)


def _coerce(settings: Settings) -> Settings:
    try:
        port = int(settings.port)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'port' must be an integer, got {settings.port!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"'port' must be between 1 and 65535, got {port}")
    level = str(settings.log_level).strip().upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigError(f"'log_level' must be one of {sorted(VALID_LOG_LEVELS)}, got {settings.log_level!r}")
    return replace(
        settings,
        database_url=str(settings.database_url).strip(),
        host=str(settings.host).strip(),
        port=port,
        api_url=str(settings.api_url).strip().rstrip("/"),
        cors_origins=_split_origins(settings.cors_origins),
        log_level=level,
    )


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from *config_path* (if given) and *environ*.

    Raises:
        ConfigError: when the file cannot be read or a value is invalid.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    if config_path is not None:
        values.update(_load_file(Path(config_path)))
    for name, keys in ENV_VARS.items():
        for key in keys:
            raw = env.get(key)
            if raw is not None and raw.strip():
                values[name] = raw
                break
    return _coerce(Settings(**values))
