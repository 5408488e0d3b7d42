"""Resolve prompt image references into displayable data URIs.

Image references come in three shapes: an inline ``data:`` URI, a path to a
file stored by the backend, or nothing at all. Resolution never raises into
the caller; fetch failures surface as a ``BROKEN`` asset so the rendering
layer can show a broken-image placeholder.

Display slots (a gallery card, the inspector preview) are re-pointed at new
references while earlier fetches may still be in flight. Every assignment
takes a generation token and a completed fetch is only published when its
token is still the slot's current one.

Updates:
  v0.2.1 - 2026-10-19 - Document the ResolvedAsset constructors.
  v0.2.0 - 2026-10-13 - Add AssetSlot generation tokens and subscriber callbacks.
  v0.1.0 - 2026-10-09 - Introduce AssetResolver with extension-based MIME mapping.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from .exceptions import AssetResolutionError, GatewayError
from .sequencing import RequestSequencer

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from models.prompt_model import Prompt

    from .gateway import CommandGateway

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"

_EXTENSION_MIME_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "gif": "image/gif",
    "svg": "image/svg+xml",
}

__all__ = [
    "AssetResolver",
    "AssetSlot",
    "AssetStatus",
    "ResolvedAsset",
    "mime_type_for_path",
    "preview_reference",
    "thumbnail_reference",
]


class AssetStatus(str, Enum):
    """Display state of an image reference."""

    LOADING = "loading"
    READY = "ready"
    MISSING = "missing"
    BROKEN = "broken"


@dataclass(slots=True, frozen=True)
class ResolvedAsset:
    """Outcome of resolving one image reference."""

    reference: str | None
    status: AssetStatus
    data_uri: str | None = None
    mime_type: str | None = None
    error: str | None = None

    @property
    def is_displayable(self) -> bool:
        """Return ``True`` when ``data_uri`` can be rendered."""
        return self.status is AssetStatus.READY and bool(self.data_uri)

    @classmethod
    def ready(cls, reference: str, data_uri: str, mime_type: str) -> ResolvedAsset:
        """Return a displayable asset for *reference*."""
        return cls(reference, AssetStatus.READY, data_uri=data_uri, mime_type=mime_type)

    @classmethod
    def missing(cls) -> ResolvedAsset:
        """Return the placeholder used when there is no reference."""
        return cls(None, AssetStatus.MISSING)

    @classmethod
    def broken(cls, reference: str, error: str) -> ResolvedAsset:
        """Return a failed asset carrying the *error* message."""
        return cls(reference, AssetStatus.BROKEN, error=error)

    @classmethod
    def loading(cls, reference: str | None) -> ResolvedAsset:
        """Return the in-flight marker for *reference*."""
        return cls(reference, AssetStatus.LOADING)


def mime_type_for_path(path: str) -> str:
    """Return the image MIME type implied by the extension of *path*."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower().lstrip(".")
    return _EXTENSION_MIME_TYPES.get(suffix, DEFAULT_MIME_TYPE)


def _inline_mime_type(data_uri: str) -> str:
    header = data_uri[len("data:") :].split(",", 1)[0]
    mime = header.split(";", 1)[0].strip()
    return mime or DEFAULT_MIME_TYPE


def _normalise_reference(reference: str | None) -> str | None:
    if reference is None:
        return None
    text = reference.strip()
    return text or None


def thumbnail_reference(prompt: Prompt) -> str | None:
    """Return the reference shown on gallery cards."""
    return prompt.thumbnail_path


def preview_reference(prompt: Prompt) -> str | None:
    """Return the reference shown in the inspector (full image first)."""
    return prompt.image_path or prompt.thumbnail_path


class AssetResolver:
    """Convert image references into data URIs through the command gateway."""

    def __init__(self, gateway: CommandGateway) -> None:
        """Store the *gateway* used to fetch stored image bytes."""
        self._gateway = gateway
        self._slots: dict[Hashable, AssetSlot] = {}

    async def resolve(self, reference: str | None) -> ResolvedAsset:
        """Resolve *reference*; failures yield a ``BROKEN`` asset instead of raising."""
        normalised = _normalise_reference(reference)
        if normalised is None:
            return ResolvedAsset.missing()
        if normalised.startswith("data:"):
            return ResolvedAsset.ready(normalised, normalised, _inline_mime_type(normalised))
        try:
            encoded = await self._fetch_encoded(normalised)
        except AssetResolutionError as exc:
            logger.info("Image reference %s could not be resolved: %s", normalised, exc)
            return ResolvedAsset.broken(normalised, str(exc))
        mime_type = mime_type_for_path(normalised)
        return ResolvedAsset.ready(
            normalised,
            f"data:{mime_type};base64,{encoded}",
            mime_type,
        )

    async def _fetch_encoded(self, path: str) -> str:
        try:
            encoded = await self._gateway.get_image_bytes(path)
        except GatewayError as exc:
            raise AssetResolutionError(exc.message) from exc
        encoded = encoded.strip()
        if not encoded:
            raise AssetResolutionError("backend returned no image data")
        return encoded

    def slot(self, key: Hashable) -> AssetSlot:
        """Return the display slot registered under *key*, creating it on demand."""
        slot = self._slots.get(key)
        if slot is None:
            slot = AssetSlot(self, key)
            self._slots[key] = slot
        return slot

    def release(self, key: Hashable) -> None:
        """Forget the slot under *key* and discard any pending result for it."""
        slot = self._slots.pop(key, None)
        if slot is not None:
            slot.reset()

    def slots(self) -> tuple[AssetSlot, ...]:
        """Return a snapshot of the registered slots."""
        return tuple(self._slots.values())


class AssetSlot:
    """A display position whose image may be re-pointed at any time."""

    def __init__(self, resolver: AssetResolver, key: Any = None) -> None:
        """Bind the slot to *resolver*; the slot starts empty."""
        self._resolver = resolver
        self._key = key
        self._sequencer = RequestSequencer()
        self._reference: str | None = None
        self._asset = ResolvedAsset.missing()
        self._listeners: list[Callable[[AssetSlot], None]] = []

    @property
    def key(self) -> Any:
        """Return the subject key the slot is registered under."""
        return self._key

    @property
    def reference(self) -> str | None:
        """Return the reference the slot currently points at."""
        return self._reference

    @property
    def asset(self) -> ResolvedAsset:
        """Return the last published asset (``LOADING`` while a fetch is pending)."""
        return self._asset

    @property
    def generation(self) -> int:
        """Return the slot's current generation token."""
        return self._sequencer.latest

    def subscribe(self, callback: Callable[[AssetSlot], None]) -> Callable[[], None]:
        """Register *callback* for publish events and return an unsubscribe function."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass

        return _unsubscribe

    async def assign(self, reference: str | None) -> ResolvedAsset | None:
        """Point the slot at *reference* and resolve it.

        Returns the published asset, or ``None`` when another assignment
        superseded this one before the fetch completed.
        """
        normalised = _normalise_reference(reference)
        if normalised == self._reference and self._asset.status is not AssetStatus.BROKEN:
            if self._asset.status is not AssetStatus.LOADING:
                return self._asset
        token = self._sequencer.issue()
        self._reference = normalised
        if normalised is not None and not normalised.startswith("data:"):
            self._publish(ResolvedAsset.loading(normalised))
        asset = await self._resolver.resolve(normalised)
        if not self._sequencer.is_current(token):
            logger.debug(
                "Discarding superseded asset for slot %r (token %s < %s)",
                self._key,
                token,
                self._sequencer.latest,
            )
            return None
        self._publish(asset)
        return asset

    def request(self, reference: str | None) -> asyncio.Task[ResolvedAsset | None]:
        """Schedule :meth:`assign` on the running event loop."""
        return asyncio.ensure_future(self.assign(reference))

    def reset(self) -> None:
        """Empty the slot and supersede any fetch still in flight."""
        self._sequencer.invalidate()
        self._reference = None
        self._publish(ResolvedAsset.missing())

    def _publish(self, asset: ResolvedAsset) -> None:
        self._asset = asset
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:  # pragma: no cover - defensive log to avoid cascading failures
                logger.exception("Asset slot subscriber raised an exception")
