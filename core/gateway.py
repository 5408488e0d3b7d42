"""Typed command gateway between the catalog core and the storage backend.

The backend is a black-box command surface: every operation is a named
command that accepts a JSON object of arguments and answers with JSON. This
module only marshals; it holds no state and applies no retries.

Updates:
  v0.3.0 - 2026-10-14 - Add get_models command and GenerationModel parsing.
  v0.2.0 - 2026-10-12 - Add HTTPX transport with status-code error mapping.
  v0.1.0 - 2026-10-08 - Introduce CommandGateway protocol and invoke-based implementation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

import httpx

from models.collection_model import Collection, GenerationModel
from models.prompt_model import Prompt

from .exceptions import (
    GatewayRejectedError,
    GatewayResponseError,
    GatewayUnavailableError,
)

if TYPE_CHECKING:
    from models.prompt_model import ImageUpload, NewPromptInput, PromptPatch

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = [
    "CommandGateway",
    "CommandTransport",
    "HttpCommandTransport",
    "InvokeCommandGateway",
]


@runtime_checkable
class CommandGateway(Protocol):
    """Operations the catalog core consumes from the storage/asset provider."""

    async def list_prompts(
        self,
        model_filter: str | None = None,
        collection_id: int | None = None,
    ) -> list[Prompt]: ...

    async def get_prompt(self, prompt_id: int) -> Prompt: ...

    async def search_prompts(self, query: str) -> list[Prompt]: ...

    async def create_prompt(
        self,
        draft: NewPromptInput,
        image: ImageUpload | None = None,
    ) -> Prompt: ...

    async def update_prompt(self, prompt_id: int, patch: PromptPatch) -> Prompt: ...

    async def delete_prompt(self, prompt_id: int) -> None: ...

    async def toggle_favorite(self, prompt_id: int) -> bool: ...

    async def list_collections(self) -> list[Collection]: ...

    async def create_collection(self, name: str) -> Collection: ...

    async def list_models(self) -> list[GenerationModel]: ...

    async def get_image_bytes(self, path: str) -> str: ...

    async def copy_text(self, text: str) -> None: ...

    async def open_asset_externally(self, path: str) -> None: ...


@runtime_checkable
class CommandTransport(Protocol):
    """Deliver a named command with JSON arguments and return the decoded reply."""

    async def invoke(self, command: str, arguments: Mapping[str, Any]) -> Any: ...


def _parse_record(command: str, payload: Any, parser: Callable[[Any], T]) -> T:
    try:
        return parser(payload)
    except ValueError as exc:
        raise GatewayResponseError(
            f"Unexpected record returned by {command}: {exc}",
            command=command,
        ) from exc


def _parse_records(command: str, payload: Any, parser: Callable[[Any], T]) -> list[T]:
    if not isinstance(payload, list):
        raise GatewayResponseError(
            f"Expected a list from {command}, received {type(payload).__name__}",
            command=command,
        )
    return [_parse_record(command, entry, parser) for entry in payload]


class InvokeCommandGateway:
    """Implement :class:`CommandGateway` on top of a :class:`CommandTransport`."""

    def __init__(self, transport: CommandTransport) -> None:
        """Store the *transport* used for every command."""
        self._transport = transport

    @property
    def transport(self) -> CommandTransport:
        """Return the underlying transport."""
        return self._transport

    async def _invoke(self, command: str, **arguments: Any) -> Any:
        logger.debug("Invoking backend command %s", command)
        return await self._transport.invoke(command, arguments)

    async def list_prompts(
        self,
        model_filter: str | None = None,
        collection_id: int | None = None,
    ) -> list[Prompt]:
        """Return prompts, optionally narrowed by model name and collection."""
        command = "get_all_prompts"
        payload = await self._invoke(
            command,
            filter=model_filter or None,
            collection_id=collection_id,
        )
        return _parse_records(command, payload, Prompt.from_payload)

    async def get_prompt(self, prompt_id: int) -> Prompt:
        """Return a single prompt by id."""
        command = "get_prompt_by_id"
        payload = await self._invoke(command, id=prompt_id)
        return _parse_record(command, payload, Prompt.from_payload)

    async def search_prompts(self, query: str) -> list[Prompt]:
        """Return prompts whose title, text, or tags match *query*."""
        command = "search_prompts"
        payload = await self._invoke(command, query=query)
        return _parse_records(command, payload, Prompt.from_payload)

    async def create_prompt(
        self,
        draft: NewPromptInput,
        image: ImageUpload | None = None,
    ) -> Prompt:
        """Persist *draft* (and optional image material) and return the stored prompt."""
        command = "create_prompt"
        image_arguments: dict[str, Any] = image.to_arguments() if image is not None else {}
        payload = await self._invoke(command, prompt=draft.to_arguments(), **image_arguments)
        return _parse_record(command, payload, Prompt.from_payload)

    async def update_prompt(self, prompt_id: int, patch: PromptPatch) -> Prompt:
        """Apply a sparse *patch* and return the updated prompt."""
        command = "update_prompt"
        payload = await self._invoke(command, id=prompt_id, prompt=patch.to_arguments())
        return _parse_record(command, payload, Prompt.from_payload)

    async def delete_prompt(self, prompt_id: int) -> None:
        """Delete a prompt and its stored images."""
        await self._invoke("delete_prompt", id=prompt_id)

    async def toggle_favorite(self, prompt_id: int) -> bool:
        """Flip the favourite flag server-side and return the new value."""
        command = "toggle_favorite"
        payload = await self._invoke(command, id=prompt_id)
        if not isinstance(payload, bool):
            raise GatewayResponseError(
                f"Expected a boolean from {command}, received {payload!r}",
                command=command,
            )
        return payload

    async def list_collections(self) -> list[Collection]:
        """Return every collection with its advisory prompt count."""
        command = "get_collections"
        payload = await self._invoke(command)
        return _parse_records(command, payload, Collection.from_payload)

    async def create_collection(self, name: str) -> Collection:
        """Create a collection called *name*."""
        command = "create_collection"
        payload = await self._invoke(command, name=name)
        return _parse_record(command, payload, Collection.from_payload)

    async def list_models(self) -> list[GenerationModel]:
        """Return the active generation models known to the backend."""
        command = "get_models"
        payload = await self._invoke(command)
        return _parse_records(command, payload, GenerationModel.from_payload)

    async def get_image_bytes(self, path: str) -> str:
        """Return the base64 encoded contents of the stored image at *path*."""
        command = "get_image_base64"
        payload = await self._invoke(command, path=path)
        if not isinstance(payload, str):
            raise GatewayResponseError(
                f"Expected base64 text from {command}",
                command=command,
            )
        return payload

    async def copy_text(self, text: str) -> None:
        """Place *text* on the system clipboard."""
        await self._invoke("copy_to_clipboard", text=text)

    async def open_asset_externally(self, path: str) -> None:
        """Open the stored image at *path* in the system viewer."""
        await self._invoke("open_image_external", path=path)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if value:
                return str(value)
    if isinstance(body, str) and body.strip():
        return body.strip()
    text = response.text.strip()
    return text or f"HTTP {response.status_code}"


@dataclass
class HttpCommandTransport:
    """HTTPX-backed transport posting commands to ``<base_url>/invoke/<command>``."""

    base_url: str
    timeout: float = 15.0
    client_factory: Callable[[], httpx.AsyncClient] | None = None

    def __post_init__(self) -> None:
        """Validate the base URL and strip trailing slashes."""
        if not self.base_url or not self.base_url.strip():
            raise ValueError("gateway base URL is required")
        self.base_url = self.base_url.strip().rstrip("/")

    async def invoke(self, command: str, arguments: Mapping[str, Any]) -> Any:
        """Send *command* and return the decoded JSON reply."""
        manage_client = self.client_factory is None
        if self.client_factory is None:
            client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        else:
            client = self.client_factory()
        try:
            response = await client.post(f"/invoke/{command}", json=dict(arguments))
        except httpx.HTTPError as exc:
            raise GatewayUnavailableError(
                f"Backend unreachable while running {command}: {exc}",
                command=command,
            ) from exc
        finally:
            if manage_client:
                await client.aclose()

        if response.status_code >= 500:
            raise GatewayUnavailableError(_error_message(response), command=command)
        if response.status_code >= 400:
            raise GatewayRejectedError(_error_message(response), command=command)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayResponseError(
                f"Backend returned invalid JSON for {command}",
                command=command,
            ) from exc
