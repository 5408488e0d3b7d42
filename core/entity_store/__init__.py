"""Entity store façade holding the client-side view of prompts and collections.

Updates:
  v0.2.0 - 2026-10-13 - Add change subscriptions for the view coordinator.
  v0.1.0 - 2026-10-09 - Compose prompt and collection mixins behind EntityStore.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..sequencing import RequestSequencer
from .collections import CollectionSupport
from .prompts import PromptSupport

if TYPE_CHECKING:
    from collections.abc import Callable

    from models.collection_model import Collection, GenerationModel
    from models.prompt_model import Prompt

    from ..gateway import CommandGateway

logger = logging.getLogger(__name__)

__all__ = ["EntityStore", "StoreSubscription"]


class StoreSubscription:
    """Disposable handle that removes its callback when closed."""

    def __init__(
        self,
        store: EntityStore,
        callback: Callable[[EntityStore], None],
    ) -> None:
        """Store *store* subscription metadata for later cleanup."""
        self._store = store
        self._callback = callback
        self._closed = False

    def close(self) -> None:
        """Detach the stored callback if it is still active."""
        if self._closed:
            return
        self._closed = True
        self._store.unsubscribe(self._callback)

    def __enter__(self) -> StoreSubscription:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class EntityStore(PromptSupport, CollectionSupport):
    """In-memory prompts and collections reconciled with a command gateway."""

    def __init__(self, gateway: CommandGateway) -> None:
        """Start empty; call :meth:`load` and :meth:`load_collections` to populate."""
        self._gateway = gateway
        self._prompts: list[Prompt] = []
        self._collections: list[Collection] = []
        self._models: list[GenerationModel] = []
        self._prompt_sequencer = RequestSequencer()
        self._collection_sequencer = RequestSequencer()
        self._pending_prompt_reads = 0
        self._pending_collection_reads = 0
        self._subscribers: list[Callable[[EntityStore], None]] = []

    @property
    def gateway(self) -> CommandGateway:
        """Return the gateway backing this store."""
        return self._gateway

    def prompts_in_collection(self, collection_id: int) -> list[Prompt]:
        """Return cached prompts whose ``collection_id`` matches *collection_id*."""
        return [prompt for prompt in self._prompts if prompt.collection_id == collection_id]

    def subscribe(self, callback: Callable[[EntityStore], None]) -> StoreSubscription:
        """Register *callback* to run after every state change."""
        self._subscribers.append(callback)
        return StoreSubscription(self, callback)

    def unsubscribe(self, callback: Callable[[EntityStore], None]) -> None:
        """Remove a previously subscribed callback if present."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception:  # pragma: no cover - defensive log to avoid cascading failures
                logger.exception("Entity store subscriber raised an exception")
