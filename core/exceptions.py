"""Common exception classes for core package.

All exceptions ultimately inherit from :class:`PromptVaultError`, allowing
callers to catch a single base class for any failure raised by the
synchronisation layer while still distinguishing transport failures from
backend rejections when they need to.

Updates:
  v0.2.0 - 2026-10-12 - Split gateway failures into unavailable/rejected/response errors.
  v0.1.0 - 2026-10-08 - Created module.
"""

from __future__ import annotations


class PromptVaultError(Exception):
    """Base exception for PromptVault failures."""


# ---------------------------------------------------------------------------
# Command gateway errors
# ---------------------------------------------------------------------------


class GatewayError(PromptVaultError):
    """Raised when a command gateway round trip fails."""

    def __init__(self, message: str, *, command: str | None = None) -> None:
        """Store the human-readable *message* and the failing *command*."""
        super().__init__(message)
        self.message = message
        self.command = command


class GatewayUnavailableError(GatewayError):
    """Raised when the backend cannot be reached or fails to answer."""


class GatewayRejectedError(GatewayError):
    """Raised when the backend rejects a command (validation, missing rows)."""


class GatewayResponseError(GatewayError):
    """Raised when the backend answers with data the client cannot interpret."""


# ---------------------------------------------------------------------------
# Asset resolution errors
# ---------------------------------------------------------------------------


class AssetResolutionError(PromptVaultError):
    """Raised when an image reference cannot be turned into displayable data."""


__all__ = [
    "AssetResolutionError",
    "GatewayError",
    "GatewayRejectedError",
    "GatewayResponseError",
    "GatewayUnavailableError",
    "PromptVaultError",
]
