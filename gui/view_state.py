"""Selection, filter, and search state for the gallery view.

Updates:
  v0.1.0 - 2026-10-11 - Replace ad hoc selection variables with an immutable state holder.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from core.filtering import SidebarSection

__all__ = ["ViewState"]


@dataclass(slots=True, frozen=True)
class ViewState:
    """Immutable snapshot of what the user is looking at.

    Every transition returns a new instance so callers can compare the
    previous and next state to decide whether prompts must be re-fetched.
    """

    section: SidebarSection = SidebarSection.ALL
    collection_id: int | None = None
    model_filter: str | None = None
    search_query: str = ""
    selected_prompt_id: int | None = None

    @property
    def fetch_collection_id(self) -> int | None:
        """Return the collection id passed to the backend when listing prompts."""
        if self.section is SidebarSection.COLLECTION:
            return self.collection_id
        return None

    def fetch_parameters(self) -> tuple[str | None, int | None]:
        """Return the server-side filter pair (model, collection)."""
        return self.model_filter, self.fetch_collection_id

    def select_section(self, section: SidebarSection | str) -> ViewState:
        """Switch sidebar section; clears the prompt selection."""
        resolved = SidebarSection(section)
        collection_id = self.collection_id if resolved is SidebarSection.COLLECTION else None
        return replace(
            self,
            section=resolved,
            collection_id=collection_id,
            selected_prompt_id=None,
        )

    def select_collection(self, collection_id: int) -> ViewState:
        """Show one collection; implies the collection section."""
        return replace(
            self,
            section=SidebarSection.COLLECTION,
            collection_id=collection_id,
            selected_prompt_id=None,
        )

    def with_model_filter(self, model: str | None) -> ViewState:
        """Return a state filtered to *model* (``None`` shows every model)."""
        cleaned = (model or "").strip() or None
        return replace(self, model_filter=cleaned)

    def with_search_query(self, query: str) -> ViewState:
        return replace(self, search_query=query)

    def select_prompt(self, prompt_id: int | None) -> ViewState:
        return replace(self, selected_prompt_id=prompt_id)

    def clear_selection(self) -> ViewState:
        return replace(self, selected_prompt_id=None)
