"""Configuration helpers for PromptVault.

Updates: v0.2.0 - 2026-10-14 - Expose known model defaults.
Updates: v0.1.0 - 2026-10-09 - Expose settings loader and configuration error types.
"""

from .settings import (
    DEFAULT_DIMENSIONS,
    DEFAULT_GATEWAY_TIMEOUT_SECONDS,
    DEFAULT_GATEWAY_URL,
    DEFAULT_KNOWN_MODELS,
    DEFAULT_MODEL,
    PromptVaultSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "DEFAULT_DIMENSIONS",
    "DEFAULT_GATEWAY_TIMEOUT_SECONDS",
    "DEFAULT_GATEWAY_URL",
    "DEFAULT_KNOWN_MODELS",
    "DEFAULT_MODEL",
    "PromptVaultSettings",
    "SettingsError",
    "load_settings",
]
