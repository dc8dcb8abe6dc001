"""Configuration loading and validation for the SkillForge UI runtime."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import tomllib
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "skillforge-ui"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class AppConfig(BaseModel):
    """Application metadata."""

    model_config = ConfigDict(populate_by_name=True)
    title: str = "SkillForge"
    welcome_message: str = "Welcome to SkillForge! 🎉"
    welcome_delay_seconds: float = Field(default=1.0, ge=0, le=60)

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("String value must not be empty.")
        return normalized


class ChatConfig(BaseModel):
    """Chat backend endpoint settings."""

    base_url: str = "http://localhost:3000"
    path: str = "/chat"
    timeout_seconds: float = Field(default=30.0, gt=0, le=600)

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("base_url must be a string.")
        normalized = value.strip().rstrip("/")
        parsed = urlparse(normalized)
        if parsed.scheme.lower() not in {"http", "https"} or not parsed.hostname:
            raise ValueError("base_url must be an http(s) URL with a hostname.")
        return normalized

    @field_validator("path", mode="before")
    @classmethod
    def _validate_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("path must not be empty.")
        return normalized if normalized.startswith("/") else f"/{normalized}"


class NotificationsConfig(BaseModel):
    """Toast lifecycle timings, in seconds."""

    default_ttl_seconds: float = Field(default=5.0, ge=0, le=3600)
    enter_delay_seconds: float = Field(default=0.1, ge=0, le=10)
    exit_delay_seconds: float = Field(default=0.3, ge=0, le=10)


class AnimationsConfig(BaseModel):
    """Scroll animation tuning."""

    threshold: float = Field(default=0.1, ge=0, le=1)
    root_margin_bottom: float = -50.0
    counter_duration_seconds: float = Field(default=2.0, gt=0, le=60)
    counter_steps: int = Field(default=100, ge=1, le=10_000)
    stagger_delay_seconds: float = Field(default=0.1, ge=0, le=10)
    parallax_default_speed: float = 0.5
    frame_interval_seconds: float = Field(default=1 / 60, gt=0, le=1)


class ThemeConfig(BaseModel):
    """Theme preference persistence."""

    persist: bool = True


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/skillforge-ui/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    chat: ChatConfig = ChatConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    animations: AnimationsConfig = AnimationsConfig()
    theme: ThemeConfig = ThemeConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_notification_timings(self) -> Config:
        timings = self.notifications
        if timings.default_ttl_seconds and timings.default_ttl_seconds < timings.enter_delay_seconds:
            raise ValueError(
                "notifications.default_ttl_seconds must not be shorter than enter_delay_seconds."
            )
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(by_alias=True)


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _safe_default_config() -> dict[str, dict[str, Any]]:
    """Return a deep copy of validated default config data."""
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump(by_alias=True)
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (
            Exception
        ) as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = (
        _deep_merge(DEFAULT_CONFIG, raw_data)
        if isinstance(raw_data, dict)
        else _safe_default_config()
    )
    return _validate_config(merged)
