"""Collection and generation model helpers for the entity store.

Updates:
  v0.2.0 - 2026-10-14 - Cache generation models for the model filter.
  v0.1.0 - 2026-10-09 - Extract collection APIs into mixin for modularisation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import GatewayError

if TYPE_CHECKING:
    from models.collection_model import Collection, GenerationModel

    from ..gateway import CommandGateway
    from ..sequencing import RequestSequencer

logger = logging.getLogger(__name__)

__all__ = ["CollectionSupport"]


class CollectionSupport:
    """Mixin exposing collection listing and creation."""

    _gateway: CommandGateway
    _collections: list[Collection]
    _models: list[GenerationModel]
    _collection_sequencer: RequestSequencer
    _pending_collection_reads: int

    def _notify(self) -> None:  # pragma: no cover - provided by EntityStore
        raise NotImplementedError

    @property
    def collections(self) -> tuple[Collection, ...]:
        """Return the cached collections."""
        return tuple(self._collections)

    @property
    def collections_loading(self) -> bool:
        """Return ``True`` while the collection list is being fetched."""
        return self._pending_collection_reads > 0

    @property
    def models(self) -> tuple[GenerationModel, ...]:
        """Return the cached generation models."""
        return tuple(self._models)

    def collection(self, collection_id: int | None) -> Collection | None:
        """Return the cached collection with *collection_id*."""
        if collection_id is None:
            return None
        for collection in self._collections:
            if collection.id == collection_id:
                return collection
        return None

    async def load_collections(self) -> list[Collection]:
        """Replace cached collections with the backend's list."""
        token = self._collection_sequencer.issue()
        self._pending_collection_reads += 1
        self._notify()
        fetched: list[Collection] | None
        try:
            fetched = await self._gateway.list_collections()
        except GatewayError as exc:
            logger.warning("Unable to load collections: %s", exc)
            fetched = None
        finally:
            self._pending_collection_reads -= 1
        if fetched is not None and self._collection_sequencer.claim(token):
            self._collections = list(fetched)
        self._notify()
        return list(self._collections)

    async def create_collection(self, name: str) -> Collection:
        """Create a collection and append the confirmed record."""
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("collection name cannot be empty")
        created = await self._gateway.create_collection(cleaned)
        self._collections = [*self._collections, created]
        self._notify()
        return created

    async def load_models(self) -> list[GenerationModel]:
        """Refresh the generation models; failures keep the cached list."""
        try:
            fetched = await self._gateway.list_models()
        except GatewayError as exc:
            logger.warning("Unable to load generation models: %s", exc)
            return list(self._models)
        self._models = [model for model in fetched if model.is_active]
        self._notify()
        return list(self._models)
