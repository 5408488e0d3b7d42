"""Tests for image reference resolution and display slots.

Updates:
  v0.2.1 - 2026-10-19 - Cover ResolvedAsset constructors.
  v0.2.0 - 2026-10-13 - Cover slot generation tokens and superseded fetches.
  v0.1.0 - 2026-10-09 - Cover MIME mapping, data URI passthrough, and broken images.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import pytest

from core.assets import (
    AssetResolver,
    AssetStatus,
    ResolvedAsset,
    mime_type_for_path,
    preview_reference,
    thumbnail_reference,
)
from core.exceptions import GatewayUnavailableError

if TYPE_CHECKING:
    from conftest import FakeGateway


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a.jpg", "image/jpeg"),
        ("a.JPEG", "image/jpeg"),
        ("dir/a.webp", "image/webp"),
        ("a.gif", "image/gif"),
        ("icon.svg", "image/svg+xml"),
        ("a.png", "image/png"),
        ("a.bmp", "image/png"),
        ("noextension", "image/png"),
        ("C:\\images\\shot.jpg", "image/jpeg"),
    ],
)
def test_mime_type_for_path(path: str, expected: str) -> None:
    """MIME types follow the file extension with PNG as the fallback."""
    assert mime_type_for_path(path) == expected


@pytest.mark.asyncio()
async def test_resolve_wraps_stored_image_as_data_uri(gateway: FakeGateway) -> None:
    """Stored paths are fetched and wrapped with the inferred MIME type."""
    gateway.images["a.jpg"] = "QUJD"
    asset = await AssetResolver(gateway).resolve("a.jpg")

    assert asset.status is AssetStatus.READY
    assert asset.data_uri == "data:image/jpeg;base64,QUJD"
    assert asset.is_displayable


@pytest.mark.asyncio()
async def test_resolve_passes_data_uri_through(gateway: FakeGateway) -> None:
    """Inline data URIs are returned unchanged without a backend call."""
    uri = "data:image/webp;base64,AAAA"
    asset = await AssetResolver(gateway).resolve(uri)

    assert asset.data_uri == uri
    assert asset.mime_type == "image/webp"
    assert gateway.calls == []


@pytest.mark.asyncio()
@pytest.mark.parametrize("reference", [None, "", "   "])
async def test_resolve_missing_reference(gateway: FakeGateway, reference: str | None) -> None:
    """Absent references resolve to the placeholder state."""
    asset = await AssetResolver(gateway).resolve(reference)
    assert asset.status is AssetStatus.MISSING
    assert not asset.is_displayable


@pytest.mark.asyncio()
async def test_resolve_failure_is_broken_not_raised(gateway: FakeGateway) -> None:
    """Gateway errors become a BROKEN asset carrying the message."""
    gateway.failures["get_image_bytes"] = GatewayUnavailableError("offline")
    asset = await AssetResolver(gateway).resolve("a.png")

    assert asset.status is AssetStatus.BROKEN
    assert asset.error == "offline"


@pytest.mark.asyncio()
async def test_resolve_empty_payload_is_broken(gateway: FakeGateway) -> None:
    """An empty base64 payload cannot be displayed."""
    gateway.images["a.png"] = "  "
    asset = await AssetResolver(gateway).resolve("a.png")
    assert asset.status is AssetStatus.BROKEN


@pytest.mark.asyncio()
async def test_slot_discards_superseded_fetch(gateway: FakeGateway) -> None:
    """Re-pointing a slot means a late result for the old reference is never shown."""
    gateway.images["r1.png"] = "UjE="
    gateway.images["r2.png"] = "UjI="
    gate_r1 = asyncio.Event()
    gateway.gates[("get_image_bytes", "r1.png")] = gate_r1
    slot = AssetResolver(gateway).slot("inspector")
    published: list[Any] = []
    slot.subscribe(lambda current: published.append(current.asset))

    first = slot.request("r1.png")
    await asyncio.sleep(0)
    second_result = await slot.assign("r2.png")
    gate_r1.set()
    first_result = await first

    assert first_result is None
    assert second_result is not None and second_result.data_uri == "data:image/png;base64,UjI="
    assert slot.asset.reference == "r2.png"
    r1_states = [asset.status for asset in published if asset.reference == "r1.png"]
    assert r1_states == [AssetStatus.LOADING]


@pytest.mark.asyncio()
async def test_slot_marks_loading_while_fetching(gateway: FakeGateway) -> None:
    """A slot reports LOADING until the fetch completes."""
    gateway.images["a.png"] = "QQ=="
    gate = asyncio.Event()
    gateway.gates[("get_image_bytes", "a.png")] = gate
    slot = AssetResolver(gateway).slot(("thumbnail", 1))

    task = slot.request("a.png")
    await asyncio.sleep(0)
    assert slot.asset.status is AssetStatus.LOADING

    gate.set()
    await task
    assert slot.asset.status is AssetStatus.READY


@pytest.mark.asyncio()
async def test_slot_reuses_ready_asset_for_same_reference(gateway: FakeGateway) -> None:
    """Assigning the published reference again does not refetch."""
    gateway.images["a.png"] = "QQ=="
    slot = AssetResolver(gateway).slot("card")

    await slot.assign("a.png")
    await slot.assign("a.png")

    assert gateway.calls == [("get_image_bytes", "a.png")]


@pytest.mark.asyncio()
async def test_broken_slot_retries_same_reference(gateway: FakeGateway) -> None:
    """A broken image is fetched again when re-assigned."""
    slot = AssetResolver(gateway).slot("card")
    broken = await slot.assign("a.png")
    gateway.images["a.png"] = "QQ=="
    fixed = await slot.assign("a.png")

    assert broken is not None and broken.status is AssetStatus.BROKEN
    assert fixed is not None and fixed.status is AssetStatus.READY


@pytest.mark.asyncio()
async def test_release_invalidates_pending_fetch(gateway: FakeGateway) -> None:
    """Releasing a slot discards its in-flight result and forgets the slot."""
    gateway.images["a.png"] = "QQ=="
    gate = asyncio.Event()
    gateway.gates[("get_image_bytes", "a.png")] = gate
    resolver = AssetResolver(gateway)
    slot = resolver.slot("card")

    task = slot.request("a.png")
    await asyncio.sleep(0)
    resolver.release("card")
    gate.set()

    assert await task is None
    assert slot.asset.status is AssetStatus.MISSING
    assert resolver.slots() == ()


def test_reference_helpers_prefer_full_image_for_preview(make_prompt: Any) -> None:
    """Cards use the thumbnail; the inspector prefers the full image."""
    prompt = make_prompt(1, image_path="full.png", thumbnail_path="thumb.png")
    bare = make_prompt(2, thumbnail_path="thumb.png")

    assert thumbnail_reference(prompt) == "thumb.png"
    assert preview_reference(prompt) == "full.png"
    assert preview_reference(bare) == "thumb.png"


def test_resolved_asset_constructors_set_status() -> None:
    """Only a ready asset with a data URI is displayable."""
    ready = ResolvedAsset.ready("a.png", "data:image/png;base64,AA==", "image/png")
    broken = ResolvedAsset.broken("a.png", "boom")

    assert ready.is_displayable
    assert ready.mime_type == "image/png"
    assert ResolvedAsset.missing().status is AssetStatus.MISSING
    assert ResolvedAsset.loading("a.png").status is AssetStatus.LOADING
    assert broken.status is AssetStatus.BROKEN and broken.error == "boom"
    assert not broken.is_displayable
    assert not ResolvedAsset.ready("a.png", "", "image/png").is_displayable
