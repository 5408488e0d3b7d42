"""View coordination namespace for PromptVault.

Updates: v0.4.0 - 2026-10-11 - Replace the Qt launcher with toolkit-neutral view coordination.
Updates: v0.1.0 - 2025-10-30 - Package scaffold.
"""

from __future__ import annotations

from .gallery_coordinator import INSPECTOR_SLOT_KEY, ActionOutcome, GalleryCoordinator
from .view_state import ViewState

__all__ = ["INSPECTOR_SLOT_KEY", "ActionOutcome", "GalleryCoordinator", "ViewState"]
