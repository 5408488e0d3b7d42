"""Collection and generation model metadata.

Updates: v0.2.0 - 2026-10-12 - Add GenerationModel for the model filter choices.
Updates: v0.1.0 - 2026-10-08 - Introduce Collection dataclass and payload helpers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_COLLECTION_ICON = "folder"
DEFAULT_COLLECTION_COLOR = "#6b7280"


def _parse_id(payload: Mapping[str, Any], kind: str) -> int:
    raw_id = payload.get("id")
    if raw_id is None or isinstance(raw_id, bool):
        raise ValueError(f"{kind} payload is missing 'id'")
    try:
        return int(raw_id)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid {kind} id: {raw_id!r}") from exc


@dataclass(slots=True, frozen=True)
class Collection:
    """Named, user-defined grouping of prompts.

    Prompts point at collections through ``Prompt.collection_id``; the
    collection never embeds its members. ``prompt_count`` is a denormalised
    hint from the backend and is not kept in sync locally.
    """

    id: int
    name: str
    icon: str = DEFAULT_COLLECTION_ICON
    color: str = DEFAULT_COLLECTION_COLOR
    prompt_count: int | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Collection:
        """Build a collection from a backend record."""
        if not isinstance(payload, Mapping):
            raise ValueError("collection payload must be a mapping")
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("collection payload is missing 'name'")
        raw_count = payload.get("prompt_count")
        prompt_count: int | None
        try:
            prompt_count = int(raw_count) if raw_count is not None else None
        except (TypeError, ValueError):
            prompt_count = None
        return cls(
            id=_parse_id(payload, "collection"),
            name=name,
            icon=str(payload.get("icon") or DEFAULT_COLLECTION_ICON),
            color=str(payload.get("color") or DEFAULT_COLLECTION_COLOR),
            prompt_count=prompt_count,
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize the collection into a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "prompt_count": self.prompt_count,
        }


@dataclass(slots=True, frozen=True)
class GenerationModel:
    """Image generation model offered by the backend."""

    id: int
    name: str
    short_name: str
    is_active: bool = True

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GenerationModel:
        """Build a generation model entry from a backend record."""
        if not isinstance(payload, Mapping):
            raise ValueError("model payload must be a mapping")
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValueError("model payload is missing 'name'")
        return cls(
            id=_parse_id(payload, "model"),
            name=name,
            short_name=str(payload.get("short_name") or name),
            is_active=bool(payload.get("is_active", True)),
        )
