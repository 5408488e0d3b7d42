"""Coordinator wiring gallery intents to the entity store and asset resolver.

Updates:
  v0.2.1 - 2026-10-19 - Document outcome helpers and accessors.
  v0.2.0 - 2026-10-15 - Release thumbnail slots for prompts that left the store.
  v0.1.0 - 2026-10-11 - Extract selection, filter, and action orchestration from the view.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.assets import preview_reference, thumbnail_reference
from core.exceptions import GatewayError
from core.filtering import SidebarSection, filter_prompts

from .view_state import ViewState

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from core.assets import AssetResolver, AssetSlot, ResolvedAsset
    from core.entity_store import EntityStore
    from models.collection_model import Collection
    from models.prompt_model import ImageUpload, NewPromptInput, Prompt

logger = logging.getLogger(__name__)

__all__ = ["INSPECTOR_SLOT_KEY", "ActionOutcome", "GalleryCoordinator"]

INSPECTOR_SLOT_KEY = "inspector"
_COPYABLE_FIELDS = frozenset({"title", "prompt_text", "negative_prompt", "seed"})
_SAVE_FALLBACK_MESSAGE = "Could not save the prompt. Please try again."


@dataclass(slots=True, frozen=True)
class ActionOutcome:
    """Result of a user action; ``error`` holds the message shown inline."""

    ok: bool
    error: str | None = None
    prompt: Prompt | None = None
    value: bool | None = None

    @classmethod
    def success(cls, prompt: Prompt | None = None, value: bool | None = None) -> ActionOutcome:
        """Return a successful outcome with the affected *prompt*."""
        return cls(True, prompt=prompt, value=value)

    @classmethod
    def failure(cls, message: str) -> ActionOutcome:
        """Return a failed outcome carrying the inline *message*."""
        return cls(False, error=message)


def _thumbnail_key(prompt_id: int) -> tuple[str, int]:
    return ("thumbnail", prompt_id)


def _message(exc: Exception, fallback: str) -> str:
    text = str(exc).strip()
    return text or fallback


class GalleryCoordinator:
    """Own the view state and translate user intents into store calls."""

    def __init__(
        self,
        store: EntityStore,
        assets: AssetResolver,
        *,
        state: ViewState | None = None,
    ) -> None:
        """Store collaborators and watch the store for removed prompts."""
        self._store = store
        self._assets = assets
        self._state = state or ViewState()
        self._subscription = store.subscribe(self._on_store_changed)

    @property
    def state(self) -> ViewState:
        """Return the current view state."""
        return self._state

    @property
    def loading(self) -> bool:
        """Return ``True`` while the store is reading prompts."""
        return self._store.loading

    def close(self) -> None:
        """Stop observing the store and drop every display slot."""
        self._subscription.close()
        for slot in self._assets.slots():
            self._assets.release(slot.key)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    async def refresh(self) -> list[Prompt]:
        """Reload prompts for the current filters together with collections and models."""
        model_filter, collection_id = self._state.fetch_parameters()
        await asyncio.gather(
            self._store.load(model_filter, collection_id),
            self._store.load_collections(),
            self._store.load_models(),
        )
        return self.visible_prompts()

    async def _apply_state(self, next_state: ViewState) -> list[Prompt]:
        previous = self._state
        self._state = next_state
        if previous.selected_prompt_id != next_state.selected_prompt_id:
            self._assets.slot(INSPECTOR_SLOT_KEY).reset()
        if previous.fetch_parameters() != next_state.fetch_parameters():
            model_filter, collection_id = next_state.fetch_parameters()
            await self._store.load(model_filter, collection_id)
        return self.visible_prompts()

    # ------------------------------------------------------------------
    # Navigation and filters
    # ------------------------------------------------------------------
    async def select_section(self, section: SidebarSection | str) -> list[Prompt]:
        """Switch sidebar section and return the prompts now visible."""
        return await self._apply_state(self._state.select_section(section))

    async def select_collection(self, collection_id: int) -> list[Prompt]:
        """Show the prompts of one collection."""
        return await self._apply_state(self._state.select_collection(collection_id))

    async def set_model_filter(self, model: str | None) -> list[Prompt]:
        """Filter by generation model; the backend applies this filter."""
        return await self._apply_state(self._state.with_model_filter(model))

    def set_search_query(self, query: str) -> list[Prompt]:
        """Update the free-text query; filtering happens locally on every keystroke."""
        self._state = self._state.with_search_query(query)
        return self.visible_prompts()

    def visible_prompts(self) -> list[Prompt]:
        """Return the prompts the gallery should render."""
        return filter_prompts(
            self._store.prompts,
            self._state.section,
            self._state.collection_id,
            self._state.search_query,
        )

    def current_collection(self) -> Collection | None:
        """Return the collection being shown, if any."""
        return self._store.collection(self._state.collection_id)

    def title(self) -> str:
        """Return the header title for the current section."""
        if self._state.section is SidebarSection.COLLECTION and self._state.collection_id:
            collection = self.current_collection()
            return collection.name if collection is not None else "Collection"
        if self._state.section is SidebarSection.FAVORITES:
            return "Favorites"
        return "Gallery"

    # ------------------------------------------------------------------
    # Selection and images
    # ------------------------------------------------------------------
    def selected_prompt(self) -> Prompt | None:
        """Return the selected prompt from the store."""
        if self._state.selected_prompt_id is None:
            return None
        return self._store.get(self._state.selected_prompt_id)

    async def select_prompt(self, prompt_id: int | None) -> Prompt | None:
        """Select a prompt and point the inspector at its full image."""
        self._state = self._state.select_prompt(prompt_id)
        prompt = self.selected_prompt()
        slot = self._assets.slot(INSPECTOR_SLOT_KEY)
        await slot.assign(preview_reference(prompt) if prompt is not None else None)
        return prompt

    def clear_selection(self) -> None:
        """Deselect the prompt and empty the inspector."""
        self._state = self._state.clear_selection()
        self._assets.slot(INSPECTOR_SLOT_KEY).reset()

    def inspector_slot(self) -> AssetSlot:
        """Return the slot showing the selected prompt's image."""
        return self._assets.slot(INSPECTOR_SLOT_KEY)

    def thumbnail_slot(self, prompt_id: int) -> AssetSlot:
        """Return the card thumbnail slot for *prompt_id*."""
        return self._assets.slot(_thumbnail_key(prompt_id))

    async def show_thumbnail(self, prompt: Prompt) -> ResolvedAsset | None:
        """Resolve the card thumbnail for *prompt* into its slot."""
        return await self.thumbnail_slot(prompt.id).assign(thumbnail_reference(prompt))

    async def show_visible_thumbnails(self) -> None:
        """Resolve thumbnails for every visible prompt concurrently."""
        await asyncio.gather(*(self.show_thumbnail(prompt) for prompt in self.visible_prompts()))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    async def create_prompt(
        self,
        draft: NewPromptInput,
        image: ImageUpload | None = None,
    ) -> ActionOutcome:
        """Save a new prompt; failures are returned for inline display."""
        try:
            created = await self._store.create(draft, image)
        except GatewayError as exc:
            logger.warning("Prompt creation failed: %s", exc)
            return ActionOutcome.failure(_message(exc, _SAVE_FALLBACK_MESSAGE))
        return ActionOutcome.success(created)

    async def create_collection(self, name: str) -> ActionOutcome:
        """Create a collection; blank names and rejections are returned inline."""
        try:
            await self._store.create_collection(name)
        except (GatewayError, ValueError) as exc:
            return ActionOutcome.failure(_message(exc, "Could not create the collection."))
        return ActionOutcome.success()

    async def toggle_favorite(self, prompt_id: int) -> ActionOutcome:
        """Flip the favourite flag and report the value the backend stored."""
        try:
            is_favorite = await self._store.toggle_favorite(prompt_id)
        except GatewayError as exc:
            return ActionOutcome.failure(_message(exc, "Could not update the favorite."))
        return ActionOutcome.success(self._store.get(prompt_id), value=is_favorite)

    async def delete_selected(self) -> ActionOutcome:
        """Delete the selected prompt; the selection survives a failed delete."""
        prompt = self.selected_prompt()
        if prompt is None:
            return ActionOutcome.failure("No prompt is selected.")
        try:
            await self._store.remove(prompt.id)
        except GatewayError as exc:
            logger.warning("Deleting prompt %s failed: %s", prompt.id, exc)
            return ActionOutcome.failure(_message(exc, "Could not delete the prompt."))
        self.clear_selection()
        return ActionOutcome.success(prompt)

    async def copy_selected(self, field: str = "prompt_text") -> ActionOutcome:
        """Copy a text field of the selected prompt to the clipboard."""
        if field not in _COPYABLE_FIELDS:
            raise ValueError(f"Unsupported field for copying: {field}")
        prompt = self.selected_prompt()
        if prompt is None:
            return ActionOutcome.failure("No prompt is selected.")
        text = getattr(prompt, field) or ""
        try:
            await self._store.gateway.copy_text(text)
        except GatewayError as exc:
            logger.warning("Copy to clipboard failed: %s", exc)
            return ActionOutcome.failure(_message(exc, "Could not copy to the clipboard."))
        return ActionOutcome.success(prompt)

    async def open_selected_image(self) -> ActionOutcome:
        """Open the selected prompt's full image in the system viewer."""
        prompt = self.selected_prompt()
        if prompt is None or not prompt.image_path:
            return ActionOutcome.failure("The selected prompt has no image.")
        try:
            await self._store.gateway.open_asset_externally(prompt.image_path)
        except GatewayError as exc:
            logger.warning("Opening image %s failed: %s", prompt.image_path, exc)
            return ActionOutcome.failure(_message(exc, "Could not open the image."))
        return ActionOutcome.success(prompt)

    # ------------------------------------------------------------------
    # Store observation
    # ------------------------------------------------------------------
    def _on_store_changed(self, store: EntityStore) -> None:
        present = {prompt.id for prompt in store.prompts}
        for slot in self._assets.slots():
            key = slot.key
            if isinstance(key, tuple) and key[0] == "thumbnail" and key[1] not in present:
                self._assets.release(key)
