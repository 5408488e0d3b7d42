"""In-memory narrowing of the loaded prompt list.

Updates:
  v0.1.1 - 2026-10-19 - Flag whitespace-only query handling for product review.
  v0.1.0 - 2026-10-10 - Introduce sidebar sections and the visible-prompt filter.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from models.prompt_model import Prompt

__all__ = ["SidebarSection", "filter_prompts", "matches_query"]


class SidebarSection(str, Enum):
    """Sidebar sections the gallery can show."""

    ALL = "all"
    FAVORITES = "favorites"
    HISTORY = "history"
    COLLECTION = "collection"


def matches_query(prompt: Prompt, query: str) -> bool:
    """Return ``True`` when *query* occurs in the title, prompt text, or a tag."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in prompt.title.lower() or needle in prompt.prompt_text.lower():
        return True
    return any(needle in tag.lower() for tag in prompt.tags)


def filter_prompts(
    prompts: Iterable[Prompt],
    section: SidebarSection | str = SidebarSection.ALL,
    collection_id: int | None = None,
    query: str = "",
) -> list[Prompt]:
    """Return the visible subset of *prompts*, preserving order.

    A non-empty *query* replaces the section narrowing entirely: favourites
    and collection membership are not checked while searching. Model
    filtering happens when prompts are fetched, not here.
    """
    resolved_section = SidebarSection(section)
    needle = query.strip()
    visible: list[Prompt] = []
    for prompt in prompts:
        if needle:
            # TODO: confirm with product whether search should also respect the section,
            # and whether a whitespace-only query should count as a search.
            if matches_query(prompt, needle):
                visible.append(prompt)
            continue
        if resolved_section is SidebarSection.FAVORITES and not prompt.is_favorite:
            continue
        if (
            resolved_section is SidebarSection.COLLECTION
            and collection_id is not None
            and prompt.collection_id != collection_id
        ):
            continue
        visible.append(prompt)
    return visible
