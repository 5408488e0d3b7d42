"""Settings management utilities for PromptVault configuration.

Updates:
  v0.2.0 - 2026-10-14 - Add known generation models and logging options.
  v0.1.1 - 2026-10-11 - Read optional JSON configuration alongside environment variables.
  v0.1.0 - 2026-10-09 - Initial gateway connection settings.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, cast

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_GATEWAY_URL = "http://127.0.0.1:8765"
DEFAULT_GATEWAY_TIMEOUT_SECONDS = 15.0
DEFAULT_MODEL = "Stable Diffusion XL"
DEFAULT_DIMENSIONS = "1:1"
DEFAULT_KNOWN_MODELS: tuple[str, ...] = (
    "Gemini",
    "Chat GPT",
    "Stable Diffusion XL",
    "Midjourney V6",
    "DALL-E 3",
    "Flux Pro",
    "Flux.1",
    "Leonardo AI",
    "Firefly",
)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
_JSON_KEYS = (
    "gateway_url",
    "gateway_timeout_seconds",
    "default_model",
    "default_dimensions",
    "known_models",
    "logging_config_path",
    "log_level",
)

logger = logging.getLogger("prompt_vault.settings")


class SettingsError(Exception):
    """Raised when PromptVault configuration cannot be loaded or validated."""


class PromptVaultSettings(BaseSettings):
    """Application configuration sourced from keyword overrides, JSON, or environment."""

    gateway_url: str = Field(
        default=DEFAULT_GATEWAY_URL,
        description="Base URL of the command backend (commands are posted to /invoke/<name>).",
    )
    gateway_timeout_seconds: float = Field(
        default=DEFAULT_GATEWAY_TIMEOUT_SECONDS,
        description="Per-command timeout applied by the HTTP transport.",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model preselected for new prompt drafts.",
    )
    default_dimensions: str = Field(
        default=DEFAULT_DIMENSIONS,
        description="Aspect ratio token preselected for new prompt drafts.",
    )
    known_models: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_KNOWN_MODELS),
        description="Model names offered before the backend model list is loaded.",
    )
    logging_config_path: Path | None = Field(
        default=None,
        description="Optional logging.config file; defaults to config/logging.conf.",
    )
    log_level: str = Field(default="INFO")

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": "PROMPT_VAULT_",
            "case_sensitive": False,
            "populate_by_name": True,
        },
    )

    @field_validator("gateway_url", mode="before")
    def _normalise_gateway_url(cls, value: Any) -> str:
        """Strip whitespace and trailing slashes from the backend URL."""
        text = str(value or "").strip().rstrip("/")
        if not text:
            raise ValueError("gateway_url cannot be empty")
        if not text.startswith(("http://", "https://")):
            raise ValueError("gateway_url must be an http(s) URL")
        return text

    @field_validator("gateway_timeout_seconds")
    def _validate_timeout(cls, value: float) -> float:
        """Ensure the gateway timeout is positive."""
        if value <= 0:
            raise ValueError("gateway_timeout_seconds must be greater than zero")
        return value

    @field_validator("default_model", "default_dimensions", mode="before")
    def _require_text(cls, value: Any) -> str:
        """Reject blank defaults."""
        text = str(value or "").strip()
        if not text:
            raise ValueError("value cannot be empty")
        return text

    @field_validator("known_models", mode="before")
    def _parse_known_models(cls, value: Any) -> list[str]:
        """Accept JSON arrays, comma separated strings, or sequences."""
        if value is None:
            return list(DEFAULT_KNOWN_MODELS)
        items: Any = value
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return list(DEFAULT_KNOWN_MODELS)
            try:
                items = json.loads(text)
            except json.JSONDecodeError:
                items = text.split(",")
        if not isinstance(items, (list, tuple)):
            raise ValueError("known_models must be a list of model names")
        models: list[str] = []
        for item in items:
            name = str(item).strip()
            if name and name not in models:
                models.append(name)
        return models

    @field_validator("logging_config_path", mode="before")
    def _normalise_logging_path(cls, value: Any) -> Path | None:
        """Expand user-relative paths and treat blanks as unset."""
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None
        return Path(text).expanduser()

    @field_validator("log_level", mode="before")
    def _validate_log_level(cls, value: Any) -> str:
        """Upper-case and validate the root log level."""
        level = str(value or "INFO").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level '{value}'")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(gateway_url="...")).
            2. JSON configuration file.
            3. Environment variables.
            4. File secrets.
        """
        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            env_settings,
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv("PROMPT_VAULT_CONFIG_JSON")
            candidates: list[Path] = []
            if explicit_path:
                candidates.append(Path(explicit_path).expanduser())
            candidates.append(Path("config") / "config.json")

            for path in candidates:
                if not path.exists():
                    if explicit_path and path == candidates[0]:
                        raise SettingsError(f"Configuration file not found: {path}")
                    continue
                try:
                    raw_contents = path.read_text(encoding="utf-8")
                except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                    raise SettingsError(f"Unable to read configuration file: {path}") from exc
                try:
                    data = json.loads(raw_contents)
                except json.JSONDecodeError as exc:
                    raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
                if not isinstance(data, dict):
                    message = f"Configuration file {path} must contain a JSON object"
                    raise SettingsError(message)
                mapping_data = cast("Mapping[object, Any]", data)
                data_dict = {str(key): value for key, value in mapping_data.items()}
                unknown = sorted(set(data_dict) - set(_JSON_KEYS))
                if unknown:
                    logger.warning(
                        "Ignoring unknown key(s) %s in configuration file %s",
                        ", ".join(unknown),
                        path,
                    )
                return {key: data_dict[key] for key in _JSON_KEYS if key in data_dict}
            return {}

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> PromptVaultSettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return PromptVaultSettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid PromptVault configuration") from exc
