"""Prompt synchronisation helpers for the entity store.

Updates:
  v0.2.1 - 2026-10-19 - Discard in-flight reads once a mutation is confirmed.
  v0.2.0 - 2026-10-13 - Sequence overlapping load/search requests and drop stale replies.
  v0.1.0 - 2026-10-09 - Extract prompt CRUD APIs into mixin for modularisation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from ..exceptions import GatewayError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from models.prompt_model import ImageUpload, NewPromptInput, Prompt, PromptPatch

    from ..gateway import CommandGateway
    from ..sequencing import RequestSequencer

logger = logging.getLogger(__name__)

__all__ = ["PromptSupport"]


class PromptSupport:
    """Mixin keeping the in-memory prompt list in step with the gateway.

    Local state only changes after the gateway confirms an operation. Failed
    mutations propagate :class:`~core.exceptions.GatewayError` and leave the
    list untouched; failed reads are logged and keep the previous list.
    A confirmed mutation also discards listings that were requested before it.
    """

    _gateway: CommandGateway
    _prompts: list[Prompt]
    _prompt_sequencer: RequestSequencer
    _pending_prompt_reads: int

    def _notify(self) -> None:  # pragma: no cover - provided by EntityStore
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    @property
    def prompts(self) -> tuple[Prompt, ...]:
        """Return the prompts currently held, newest insertions first."""
        return tuple(self._prompts)

    @property
    def loading(self) -> bool:
        """Return ``True`` while a load or search request is in flight."""
        return self._pending_prompt_reads > 0

    def get(self, prompt_id: int) -> Prompt | None:
        """Return the cached prompt with *prompt_id*."""
        index = self._index_of(prompt_id)
        return None if index is None else self._prompts[index]

    def _index_of(self, prompt_id: int) -> int | None:
        for index, prompt in enumerate(self._prompts):
            if prompt.id == prompt_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def load(
        self,
        model_filter: str | None = None,
        collection_id: int | None = None,
    ) -> list[Prompt]:
        """Replace the prompt list with the backend's (optionally filtered) prompts."""
        return await self._replace_prompts(
            "load",
            lambda: self._gateway.list_prompts(model_filter, collection_id),
        )

    async def search(self, query: str) -> list[Prompt]:
        """Replace the prompt list with the backend's full-text matches for *query*."""
        return await self._replace_prompts(
            "search",
            lambda: self._gateway.search_prompts(query),
        )

    async def _replace_prompts(
        self,
        operation: str,
        fetch: Callable[[], Awaitable[list[Prompt]]],
    ) -> list[Prompt]:
        token = self._prompt_sequencer.issue()
        self._pending_prompt_reads += 1
        self._notify()
        fetched: list[Prompt] | None
        try:
            fetched = await fetch()
        except GatewayError as exc:
            logger.warning(
                "Prompt %s failed; keeping %d cached prompts: %s",
                operation,
                len(self._prompts),
                exc,
            )
            fetched = None
        finally:
            self._pending_prompt_reads -= 1

        if fetched is not None:
            if self._prompt_sequencer.claim(token):
                self._prompts = list(fetched)
            else:
                logger.debug(
                    "Discarding stale prompt %s response (token %s, applied %s)",
                    operation,
                    token,
                    self._prompt_sequencer.applied,
                )
        self._notify()
        return list(self._prompts)

    async def fetch(self, prompt_id: int) -> Prompt | None:
        """Fetch one prompt and refresh the cached copy in place."""
        try:
            prompt = await self._gateway.get_prompt(prompt_id)
        except GatewayError as exc:
            logger.warning("Unable to fetch prompt %s: %s", prompt_id, exc)
            return None
        index = self._index_of(prompt_id)
        if index is not None:
            self._replace_at(index, prompt)
        return prompt

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def create(
        self,
        draft: NewPromptInput,
        image: ImageUpload | None = None,
    ) -> Prompt:
        """Create a prompt and prepend the confirmed record."""
        created = await self._gateway.create_prompt(draft, image)
        self._supersede_reads()
        self._prompts = [created, *(p for p in self._prompts if p.id != created.id)]
        logger.info("Created prompt %s (%s)", created.id, created.title)
        self._notify()
        return created

    async def update(self, prompt_id: int, patch: PromptPatch) -> Prompt:
        """Apply *patch* and replace the cached prompt without moving it."""
        if patch.is_empty():
            raise ValueError("patch does not change any field")
        updated = await self._gateway.update_prompt(prompt_id, patch)
        self._supersede_reads()
        index = self._index_of(prompt_id)
        if index is not None:
            self._replace_at(index, updated)
        return updated

    async def remove(self, prompt_id: int) -> None:
        """Delete a prompt; the cached copy is dropped only after confirmation."""
        await self._gateway.delete_prompt(prompt_id)
        self._supersede_reads()
        remaining = [prompt for prompt in self._prompts if prompt.id != prompt_id]
        if len(remaining) != len(self._prompts):
            self._prompts = remaining
            self._notify()
        logger.info("Deleted prompt %s", prompt_id)

    async def toggle_favorite(self, prompt_id: int) -> bool:
        """Flip the favourite flag server-side and mirror the returned value."""
        is_favorite = await self._gateway.toggle_favorite(prompt_id)
        self._supersede_reads()
        index = self._index_of(prompt_id)
        if index is not None:
            self._replace_at(index, replace(self._prompts[index], is_favorite=is_favorite))
        return is_favorite

    def _supersede_reads(self) -> None:
        # Listings requested before a confirmed mutation predate it.
        self._prompt_sequencer.claim(self._prompt_sequencer.issue())

    def _replace_at(self, index: int, prompt: Prompt) -> None:
        prompts = list(self._prompts)
        prompts[index] = prompt
        self._prompts = prompts
        self._notify()
