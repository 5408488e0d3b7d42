"""Core synchronisation layer for PromptVault.

Updates:
  v0.2.0 - 2026-10-14 - Export factory helpers and logging bootstrap.
  v0.1.0 - 2026-10-09 - Surface EntityStore, AssetResolver, gateway, and filter APIs.
"""

from .assets import (
    AssetResolver,
    AssetSlot,
    AssetStatus,
    ResolvedAsset,
    mime_type_for_path,
    preview_reference,
    thumbnail_reference,
)
from .entity_store import EntityStore, StoreSubscription
from .exceptions import (
    AssetResolutionError,
    GatewayError,
    GatewayRejectedError,
    GatewayResponseError,
    GatewayUnavailableError,
    PromptVaultError,
)
from .factory import CatalogServices, build_catalog_services, build_gateway
from .filtering import SidebarSection, filter_prompts, matches_query
from .gateway import (
    CommandGateway,
    CommandTransport,
    HttpCommandTransport,
    InvokeCommandGateway,
)
from .runtime import setup_logging
from .sequencing import RequestSequencer

__all__ = [
    "AssetResolutionError",
    "AssetResolver",
    "AssetSlot",
    "AssetStatus",
    "CatalogServices",
    "CommandGateway",
    "CommandTransport",
    "EntityStore",
    "GatewayError",
    "GatewayRejectedError",
    "GatewayResponseError",
    "GatewayUnavailableError",
    "HttpCommandTransport",
    "InvokeCommandGateway",
    "PromptVaultError",
    "RequestSequencer",
    "ResolvedAsset",
    "SidebarSection",
    "StoreSubscription",
    "build_catalog_services",
    "build_gateway",
    "filter_prompts",
    "matches_query",
    "mime_type_for_path",
    "preview_reference",
    "setup_logging",
    "thumbnail_reference",
]
