"""Prompt data model definitions.

Updates: v0.3.0 - 2026-10-12 - Add ImageUpload payload for create_prompt round trips.
Updates: v0.2.0 - 2026-10-10 - Normalise tag payloads at the ingestion boundary.
Updates: v0.1.0 - 2026-10-08 - Initial Prompt, NewPromptInput and PromptPatch schema.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

DEFAULT_DIMENSIONS = "1:1"

_PATCH_UNSET: Any = object()


def _decode_tag_string(value: str) -> list[Any]:
    """Return the items of a string-encoded tag array, or an empty list."""
    text = value.strip()
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return []
    if isinstance(parsed, list):
        return parsed
    return []


def normalize_tags(value: Any) -> tuple[str, ...]:
    """Coerce wire tag payloads into an ordered, duplicate-free tuple of strings.

    The backend sends tags either as a native array or as a JSON encoded array
    string. Anything else (numbers, mappings, undecodable strings) degrades to
    an empty tuple; this helper never raises.
    """
    raw_items: Iterable[Any]
    if value is None:
        return ()
    if isinstance(value, str):
        raw_items = _decode_tag_string(value)
    elif isinstance(value, (list, tuple)):
        raw_items = value
    else:
        return ()

    tags: list[str] = []
    seen: set[str] = set()
    for raw in raw_items:
        if not isinstance(raw, str):
            continue
        text = raw.strip()
        if not text or text in seen:
            continue
        seen.add(text)
        tags.append(text)
    return tuple(tags)


def _require_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        raise ValueError(f"prompt payload is missing '{key}'")
    return str(value)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True, frozen=True)
class Prompt:
    """Saved text-to-image generation request with its metadata."""

    id: int
    title: str
    prompt_text: str
    model: str
    negative_prompt: str = ""
    dimensions: str = DEFAULT_DIMENSIONS
    steps: int | None = None
    cfg_scale: float | None = None
    sampler: str | None = None
    seed: str | None = None
    image_path: str | None = None
    thumbnail_path: str | None = None
    tags: tuple[str, ...] = ()
    is_favorite: bool = False
    collection_id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Prompt:
        """Build a prompt from a backend record.

        Raises:
          ValueError: when a required field is missing or the id is not an integer.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("prompt payload must be a mapping")
        raw_id = payload.get("id")
        if raw_id is None or isinstance(raw_id, bool):
            raise ValueError("prompt payload is missing 'id'")
        try:
            prompt_id = int(raw_id)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"invalid prompt id: {raw_id!r}") from exc
        return cls(
            id=prompt_id,
            title=_require_text(payload, "title"),
            prompt_text=_require_text(payload, "prompt_text"),
            model=_require_text(payload, "model"),
            negative_prompt=str(payload.get("negative_prompt") or ""),
            dimensions=str(payload.get("dimensions") or DEFAULT_DIMENSIONS),
            steps=_optional_int(payload.get("steps")),
            cfg_scale=_optional_float(payload.get("cfg_scale")),
            sampler=_optional_text(payload.get("sampler")),
            seed=_optional_text(payload.get("seed")),
            image_path=_optional_text(payload.get("image_path")),
            thumbnail_path=_optional_text(payload.get("thumbnail_path")),
            tags=normalize_tags(payload.get("tags")),
            is_favorite=bool(payload.get("is_favorite", False)),
            collection_id=_optional_int(payload.get("collection_id")),
            created_at=_optional_text(payload.get("created_at")),
            updated_at=_optional_text(payload.get("updated_at")),
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize the prompt into a plain dictionary."""
        record = {item.name: getattr(self, item.name) for item in fields(self)}
        record["tags"] = list(self.tags)
        return record


@dataclass(slots=True)
class NewPromptInput:
    """Draft fields supplied when creating a prompt."""

    title: str
    prompt_text: str
    model: str
    negative_prompt: str = ""
    dimensions: str = DEFAULT_DIMENSIONS
    steps: int | None = None
    sampler: str | None = None
    cfg_scale: float | None = None
    seed: str | None = None
    tags: list[str] = field(default_factory=list)
    collection_id: int | None = None

    def __post_init__(self) -> None:
        """Trim required text and deduplicate tags."""
        self.title = self.title.strip()
        self.prompt_text = self.prompt_text.strip()
        self.model = self.model.strip()
        if not self.title:
            raise ValueError("title cannot be empty")
        if not self.prompt_text:
            raise ValueError("prompt_text cannot be empty")
        if not self.model:
            raise ValueError("model cannot be empty")
        self.dimensions = self.dimensions.strip() or DEFAULT_DIMENSIONS
        self.tags = list(normalize_tags(list(self.tags)))

    def to_arguments(self) -> dict[str, Any]:
        """Return the ``prompt`` argument expected by the backend."""
        return {
            "title": self.title,
            "prompt_text": self.prompt_text,
            "negative_prompt": self.negative_prompt,
            "model": self.model,
            "dimensions": self.dimensions,
            "steps": self.steps,
            "sampler": self.sampler,
            "cfg_scale": self.cfg_scale,
            "seed": self.seed,
            "tags": list(self.tags),
            "collection_id": self.collection_id,
        }


@dataclass(slots=True)
class PromptPatch:
    """Sparse update; only fields that were explicitly set are sent."""

    title: str | None = _PATCH_UNSET
    prompt_text: str | None = _PATCH_UNSET
    negative_prompt: str | None = _PATCH_UNSET
    model: str | None = _PATCH_UNSET
    dimensions: str | None = _PATCH_UNSET
    steps: int | None = _PATCH_UNSET
    sampler: str | None = _PATCH_UNSET
    cfg_scale: float | None = _PATCH_UNSET
    seed: str | None = _PATCH_UNSET
    tags: list[str] | None = _PATCH_UNSET
    is_favorite: bool | None = _PATCH_UNSET
    collection_id: int | None = _PATCH_UNSET

    def __post_init__(self) -> None:
        """Reject blank required text and normalise tags when present."""
        for name in ("title", "prompt_text", "model"):
            value = getattr(self, name)
            if value is _PATCH_UNSET or value is None:
                continue
            stripped = str(value).strip()
            if not stripped:
                raise ValueError(f"{name} cannot be empty")
            setattr(self, name, stripped)
        if self.tags is not _PATCH_UNSET and self.tags is not None:
            self.tags = list(normalize_tags(list(self.tags)))

    def to_arguments(self) -> dict[str, Any]:
        """Return only the explicitly assigned fields."""
        arguments: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is _PATCH_UNSET:
                continue
            arguments[item.name] = list(value) if item.name == "tags" and value else value
        return arguments

    def is_empty(self) -> bool:
        """Return ``True`` when the patch would not change anything."""
        return not self.to_arguments()


@dataclass(slots=True)
class ImageUpload:
    """Image material attached to a new prompt."""

    data: bytes | None = None
    filename: str | None = None
    path: str | None = None
    data_url: str | None = None

    @property
    def has_image(self) -> bool:
        """Return ``True`` when any image source was supplied."""
        return bool(self.data) or bool(self.path) or bool(self.data_url)

    def to_arguments(self) -> dict[str, Any]:
        """Return the image arguments of the ``create_prompt`` command."""
        return {
            # The backend deserialises raw bytes from a JSON array of integers.
            "image_data": list(self.data) if self.data else None,
            "filename": self.filename or None,
            "image_path": self.path or None,
            "image_base64": self.data_url or None,
            "has_image": self.has_image,
        }


__all__ = [
    "DEFAULT_DIMENSIONS",
    "ImageUpload",
    "NewPromptInput",
    "Prompt",
    "PromptPatch",
    "normalize_tags",
]
