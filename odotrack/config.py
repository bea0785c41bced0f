from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

SYSTEM_CONFIG_PATH = Path("/etc/odotrack/odotrack.yml")
DEFAULT_CONFIG_PATH = Path("configs/odotrack.yml")


class LoggingConfig(BaseModel):
    level: str = Field("INFO")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return level


class StorageConfig(BaseModel):
    db_path: Path = Field(Path("data/odotrack.db"))
    busy_timeout_secs: float = Field(30.0, gt=0, le=600)
    atomic_wipe: bool = Field(True)  # both deletions in one transaction

    @field_validator("db_path")
    @classmethod
    def _expand_db_path(cls, value: Path) -> Path:
        return value.expanduser()


class AuthConfig(BaseModel):
    api_key_env: str = Field("ODOTRACK_API_KEY")
    api_key: str | None = Field(default=None)  # env var wins when set
    header: str = Field("x-api-key")

    def resolve_api_key(self) -> str | None:
        """Shared secret from the environment, else the inline value."""
        val = os.environ.get(self.api_key_env, "").strip()
        if val:
            return val
        return self.api_key or None


class WebConfig(BaseModel):
    bind_host: str = Field("0.0.0.0")
    bind_port: int = Field(3000, ge=1, le=65535)
    cors_origin: str | None = Field("*")  # None disables CORS headers

    @field_validator("bind_host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        if not value or any(c.isspace() for c in value):
            raise ValueError("bind_host must be a valid hostname or IP")
        return value


class TrackingConfig(BaseModel):
    strict_bounds: bool = Field(False)  # reject lat/lon outside degree ranges


class OdoConfig(BaseModel):
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    db_path = os.environ.get("ODOTRACK_DB_PATH", "").strip()
    if db_path:
        raw.setdefault("storage", {})["db_path"] = db_path
    port = os.environ.get("PORT", "").strip()
    if port:
        raw.setdefault("web", {})["bind_port"] = port
    return raw


def load_config(path: Path | None = None) -> OdoConfig:
    """Load YAML config from path; defaults only when path is None."""
    raw: dict[str, Any] = {}
    if path is not None:
        with Path(path).expanduser().open("r", encoding="utf-8") as fp:
            raw = yaml.safe_load(fp) or {}
    if not isinstance(raw, dict):
        raise ValueError("config root must be a mapping")
    raw = _apply_env_overrides(raw)
    try:
        return OdoConfig.model_validate(raw)
    except ValidationError as exc:  # pragma: no cover - formatting
        raise ValueError(str(exc)) from exc


def resolve_config_path(cli_path: Path | None) -> Path:
    """
    First existing config among the CLI path, $ODOTRACK_CONFIG,
    /etc/odotrack/odotrack.yml and the repo default.

    When none exists the highest-priority candidate is returned, so callers
    report the path the operator asked for.
    """
    env = os.environ.get("ODOTRACK_CONFIG", "").strip()
    candidates = [
        Path(p).expanduser()
        for p in (cli_path, env or None, SYSTEM_CONFIG_PATH, DEFAULT_CONFIG_PATH)
        if p
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate.resolve()
    return candidates[0]


def load_resolved_config(cli_path: Path | None = None) -> OdoConfig:
    """Resolve and load config; built-in defaults when no file exists."""
    path = resolve_config_path(cli_path)
    if not path.exists():
        return load_config(None)
    return load_config(path)
