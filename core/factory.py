"""Factories for constructing the catalog core from validated settings.

Updates:
  v0.1.1 - 2026-10-14 - Allow injecting a prebuilt transport for embedding and tests.
  v0.1.0 - 2026-10-10 - Build gateway, store, and resolver from PromptVaultSettings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .assets import AssetResolver
from .entity_store import EntityStore
from .gateway import HttpCommandTransport, InvokeCommandGateway

if TYPE_CHECKING:  # pragma: no cover - typing only
    from config import PromptVaultSettings

    from .gateway import CommandGateway, CommandTransport

factory_logger = logging.getLogger("prompt_vault.factory")

__all__ = ["CatalogServices", "build_catalog_services", "build_gateway"]


@dataclass(slots=True)
class CatalogServices:
    """Gateway, entity store, and asset resolver sharing one backend."""

    gateway: CommandGateway
    store: EntityStore
    assets: AssetResolver


def build_gateway(
    settings: PromptVaultSettings,
    *,
    transport: CommandTransport | None = None,
) -> InvokeCommandGateway:
    """Return an invoke-style gateway for *settings* (HTTP unless *transport* is given)."""
    if transport is None:
        transport = HttpCommandTransport(
            base_url=settings.gateway_url,
            timeout=settings.gateway_timeout_seconds,
        )
        factory_logger.info(
            "Using command backend at %s (timeout %.1fs)",
            settings.gateway_url,
            settings.gateway_timeout_seconds,
        )
    return InvokeCommandGateway(transport)


def build_catalog_services(
    settings: PromptVaultSettings,
    *,
    gateway: CommandGateway | None = None,
    transport: CommandTransport | None = None,
) -> CatalogServices:
    """Wire a store and resolver around a single gateway instance."""
    resolved_gateway: CommandGateway = gateway or build_gateway(settings, transport=transport)
    return CatalogServices(
        gateway=resolved_gateway,
        store=EntityStore(resolved_gateway),
        assets=AssetResolver(resolved_gateway),
    )
