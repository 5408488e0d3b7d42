"""Tests for the invoke-style command gateway and its HTTPX transport.

Updates:
  v0.2.0 - 2026-10-12 - Cover HTTP status code error mapping.
  v0.1.0 - 2026-10-08 - Cover command names, argument marshalling, and record parsing.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx
import pytest

from core.exceptions import (
    GatewayRejectedError,
    GatewayResponseError,
    GatewayUnavailableError,
)
from core.gateway import CommandGateway, HttpCommandTransport, InvokeCommandGateway
from models.prompt_model import ImageUpload, NewPromptInput, PromptPatch

_PROMPT = {"id": 7, "title": "T", "prompt_text": "P", "model": "X", "tags": "[]"}


class _RecordingTransport:
    """Transport returning canned replies and recording every command."""

    def __init__(self, replies: Mapping[str, Any]) -> None:
        self.replies = dict(replies)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def invoke(self, command: str, arguments: Mapping[str, Any]) -> Any:
        self.calls.append((command, dict(arguments)))
        return self.replies.get(command)


def _build_mock_client(
    handler: Any,
    base_url: str = "http://backend.test",
) -> httpx.AsyncClient:
    """Return an AsyncClient routed through *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


def test_invoke_gateway_satisfies_protocol() -> None:
    """The invoke gateway implements every CommandGateway operation."""
    gateway = InvokeCommandGateway(_RecordingTransport({}))
    assert isinstance(gateway, CommandGateway)


@pytest.mark.asyncio()
async def test_list_prompts_sends_filters_and_parses_records() -> None:
    """Listing maps to get_all_prompts with filter and collection arguments."""
    transport = _RecordingTransport({"get_all_prompts": [_PROMPT]})
    gateway = InvokeCommandGateway(transport)

    prompts = await gateway.list_prompts("flux", 3)

    assert transport.calls == [("get_all_prompts", {"filter": "flux", "collection_id": 3})]
    assert [prompt.id for prompt in prompts] == [7]


@pytest.mark.asyncio()
async def test_list_prompts_sends_null_for_empty_model_filter() -> None:
    """An empty model filter is sent as null rather than an empty string."""
    transport = _RecordingTransport({"get_all_prompts": []})
    await InvokeCommandGateway(transport).list_prompts("", None)
    assert transport.calls[0][1]["filter"] is None


@pytest.mark.asyncio()
async def test_create_prompt_includes_image_arguments() -> None:
    """Prompt creation wraps the draft and flattens image material."""
    transport = _RecordingTransport({"create_prompt": _PROMPT})
    gateway = InvokeCommandGateway(transport)
    draft = NewPromptInput(title="T", prompt_text="P", model="X")

    created = await gateway.create_prompt(draft, ImageUpload(path="/tmp/cat.webp"))

    command, arguments = transport.calls[0]
    assert command == "create_prompt"
    assert arguments["prompt"]["title"] == "T"
    assert arguments["image_path"] == "/tmp/cat.webp"
    assert arguments["has_image"] is True
    assert created.id == 7


@pytest.mark.asyncio()
async def test_create_prompt_without_image_sends_prompt_only() -> None:
    """No image arguments are sent when no upload is supplied."""
    transport = _RecordingTransport({"create_prompt": _PROMPT})
    draft = NewPromptInput(title="T", prompt_text="P", model="X")
    await InvokeCommandGateway(transport).create_prompt(draft)
    assert set(transport.calls[0][1]) == {"prompt"}


@pytest.mark.asyncio()
async def test_update_prompt_sends_sparse_patch() -> None:
    """Updates carry only the explicitly set fields."""
    transport = _RecordingTransport({"update_prompt": {**_PROMPT, "title": "New"}})
    updated = await InvokeCommandGateway(transport).update_prompt(7, PromptPatch(title="New"))

    assert transport.calls == [("update_prompt", {"id": 7, "prompt": {"title": "New"}})]
    assert updated.title == "New"


@pytest.mark.asyncio()
async def test_toggle_favorite_requires_boolean_reply() -> None:
    """Non-boolean favourite replies are treated as malformed responses."""
    gateway = InvokeCommandGateway(_RecordingTransport({"toggle_favorite": "yes"}))
    with pytest.raises(GatewayResponseError):
        await gateway.toggle_favorite(1)


@pytest.mark.asyncio()
async def test_malformed_records_raise_response_error() -> None:
    """Records missing required fields surface as GatewayResponseError."""
    gateway = InvokeCommandGateway(_RecordingTransport({"get_all_prompts": [{"id": 1}]}))
    with pytest.raises(GatewayResponseError) as excinfo:
        await gateway.list_prompts()
    assert excinfo.value.command == "get_all_prompts"


@pytest.mark.asyncio()
async def test_auxiliary_commands_use_backend_names() -> None:
    """Clipboard, external open, image, model, and collection commands map by name."""
    transport = _RecordingTransport(
        {
            "get_image_base64": "aGVsbG8=",
            "get_models": [{"id": 1, "name": "Flux", "short_name": "flux"}],
            "get_collections": [{"id": 2, "name": "Portraits"}],
        }
    )
    gateway = InvokeCommandGateway(transport)

    assert await gateway.get_image_bytes("a.png") == "aGVsbG8="
    assert [model.short_name for model in await gateway.list_models()] == ["flux"]
    assert [c.name for c in await gateway.list_collections()] == ["Portraits"]
    await gateway.copy_text("hello")
    await gateway.open_asset_externally("a.png")

    commands = [command for command, _ in transport.calls]
    assert commands == [
        "get_image_base64",
        "get_models",
        "get_collections",
        "copy_to_clipboard",
        "open_image_external",
    ]


@pytest.mark.asyncio()
async def test_http_transport_posts_json_to_invoke_endpoint() -> None:
    """Commands are POSTed as JSON to /invoke/<command>."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=True)

    client = _build_mock_client(handler)
    transport = HttpCommandTransport(base_url="http://backend.test/", client_factory=lambda: client)

    result = await transport.invoke("toggle_favorite", {"id": 4})
    await client.aclose()

    assert result is True
    assert transport.base_url == "http://backend.test"
    assert seen[0].url.path == "/invoke/toggle_favorite"
    assert json.loads(seen[0].content) == {"id": 4}


@pytest.mark.asyncio()
async def test_http_transport_returns_none_for_empty_body() -> None:
    """Commands without a result answer with an empty body."""
    client = _build_mock_client(lambda _: httpx.Response(204))
    transport = HttpCommandTransport(base_url="http://backend.test", client_factory=lambda: client)
    assert await transport.invoke("delete_prompt", {"id": 1}) is None
    await client.aclose()


@pytest.mark.asyncio()
async def test_http_transport_maps_client_errors_to_rejections() -> None:
    """4xx responses become GatewayRejectedError carrying the backend message."""
    client = _build_mock_client(
        lambda _: httpx.Response(400, json={"error": "Title is required"})
    )
    transport = HttpCommandTransport(base_url="http://backend.test", client_factory=lambda: client)

    with pytest.raises(GatewayRejectedError) as excinfo:
        await transport.invoke("create_prompt", {})
    await client.aclose()

    assert excinfo.value.message == "Title is required"
    assert excinfo.value.command == "create_prompt"


@pytest.mark.asyncio()
async def test_http_transport_maps_server_errors_to_unavailable() -> None:
    """5xx responses mean the backend failed to answer."""
    client = _build_mock_client(lambda _: httpx.Response(503, text="busy"))
    transport = HttpCommandTransport(base_url="http://backend.test", client_factory=lambda: client)

    with pytest.raises(GatewayUnavailableError) as excinfo:
        await transport.invoke("get_all_prompts", {})
    await client.aclose()

    assert excinfo.value.message == "busy"


@pytest.mark.asyncio()
async def test_http_transport_wraps_connection_errors() -> None:
    """Network failures are reported as GatewayUnavailableError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _build_mock_client(handler)
    transport = HttpCommandTransport(base_url="http://backend.test", client_factory=lambda: client)

    with pytest.raises(GatewayUnavailableError):
        await transport.invoke("get_collections", {})
    await client.aclose()


@pytest.mark.asyncio()
async def test_http_transport_rejects_invalid_json() -> None:
    """Undecodable bodies surface as GatewayResponseError."""
    client = _build_mock_client(lambda _: httpx.Response(200, text="<html>"))
    transport = HttpCommandTransport(base_url="http://backend.test", client_factory=lambda: client)

    with pytest.raises(GatewayResponseError):
        await transport.invoke("get_models", {})
    await client.aclose()


def test_http_transport_requires_base_url() -> None:
    """An empty base URL is rejected at construction time."""
    with pytest.raises(ValueError):
        HttpCommandTransport(base_url="  ")
