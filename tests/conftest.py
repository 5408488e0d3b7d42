"""Pytest configuration for shared test fixtures.

Updates:
  v0.2.0 - 2026-10-15 - Replace the Qt offscreen hook with an in-memory command gateway.
  v0.1.0 - 2025-12-10 - Force Qt offscreen platform for headless test runs.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

import pytest

from core.exceptions import GatewayError
from models.collection_model import Collection, GenerationModel
from models.prompt_model import ImageUpload, NewPromptInput, Prompt, PromptPatch


def make_prompt(prompt_id: int, title: str = "", **overrides: Any) -> Prompt:
    """Return a prompt with sensible defaults for tests."""
    values: dict[str, Any] = {
        "id": prompt_id,
        "title": title or f"Prompt {prompt_id}",
        "prompt_text": f"text for prompt {prompt_id}",
        "model": "flux",
    }
    values.update(overrides)
    return Prompt(**values)


class FakeGateway:
    """Scriptable in-memory CommandGateway.

    ``gates`` holds events keyed by ``(operation, key)``; a call waits on its
    gate before answering so tests can control completion order. ``failures``
    maps an operation name to the error it raises.
    """

    def __init__(self) -> None:
        self.prompts: list[Prompt] = []
        self.listings: dict[tuple[str | None, int | None], list[Prompt]] = {}
        self.search_results: dict[str, list[Prompt]] = {}
        self.collections: list[Collection] = []
        self.models: list[GenerationModel] = []
        self.images: dict[str, str] = {}
        self.favorites: dict[int, bool] = {}
        self.failures: dict[str, GatewayError] = {}
        self.gates: dict[tuple[str, Any], asyncio.Event] = {}
        self.calls: list[tuple[str, Any]] = []
        self.next_id = 100

    async def _enter(self, operation: str, key: Any = None) -> None:
        self.calls.append((operation, key))
        gate = self.gates.get((operation, key))
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(operation)
        if failure is not None:
            raise failure

    async def list_prompts(
        self,
        model_filter: str | None = None,
        collection_id: int | None = None,
    ) -> list[Prompt]:
        await self._enter("list_prompts", model_filter)
        listing = self.listings.get((model_filter, collection_id))
        return list(listing if listing is not None else self.prompts)

    async def get_prompt(self, prompt_id: int) -> Prompt:
        await self._enter("get_prompt", prompt_id)
        for prompt in self.prompts:
            if prompt.id == prompt_id:
                return prompt
        raise GatewayError(f"Prompt {prompt_id} not found", command="get_prompt_by_id")

    async def search_prompts(self, query: str) -> list[Prompt]:
        await self._enter("search_prompts", query)
        return list(self.search_results.get(query, []))

    async def create_prompt(
        self,
        draft: NewPromptInput,
        image: ImageUpload | None = None,
    ) -> Prompt:
        await self._enter("create_prompt", draft.title)
        created = Prompt(
            id=self.next_id,
            title=draft.title,
            prompt_text=draft.prompt_text,
            model=draft.model,
            tags=tuple(draft.tags),
            collection_id=draft.collection_id,
            image_path="images/new.png" if image is not None and image.has_image else None,
        )
        self.next_id += 1
        self.prompts.insert(0, created)
        return created

    async def update_prompt(self, prompt_id: int, patch: PromptPatch) -> Prompt:
        await self._enter("update_prompt", prompt_id)
        current = await self.get_prompt(prompt_id)
        changes = patch.to_arguments()
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())
        return replace(current, **changes)

    async def delete_prompt(self, prompt_id: int) -> None:
        await self._enter("delete_prompt", prompt_id)
        self.prompts = [prompt for prompt in self.prompts if prompt.id != prompt_id]

    async def toggle_favorite(self, prompt_id: int) -> bool:
        await self._enter("toggle_favorite", prompt_id)
        value = not self.favorites.get(prompt_id, False)
        self.favorites[prompt_id] = value
        return value

    async def list_collections(self) -> list[Collection]:
        await self._enter("list_collections")
        return list(self.collections)

    async def create_collection(self, name: str) -> Collection:
        await self._enter("create_collection", name)
        created = Collection(id=self.next_id, name=name)
        self.next_id += 1
        self.collections.append(created)
        return created

    async def list_models(self) -> list[GenerationModel]:
        await self._enter("list_models")
        return list(self.models)

    async def get_image_bytes(self, path: str) -> str:
        await self._enter("get_image_bytes", path)
        if path not in self.images:
            raise GatewayError(f"Image not found: {path}", command="get_image_base64")
        return self.images[path]

    async def copy_text(self, text: str) -> None:
        await self._enter("copy_text", text)

    async def open_asset_externally(self, path: str) -> None:
        await self._enter("open_asset_externally", path)


@pytest.fixture()
def gateway() -> FakeGateway:
    """Return a fresh in-memory gateway."""
    return FakeGateway()


@pytest.fixture(name="make_prompt")
def make_prompt_fixture() -> Any:
    """Expose :func:`make_prompt` to tests."""
    return make_prompt
