"""Data models for PromptVault.

Updates: v0.2.0 - 2026-10-12 - Export GenerationModel and ImageUpload.
Updates: v0.1.0 - 2026-10-08 - Export Prompt and Collection dataclasses.
"""

from .collection_model import Collection, GenerationModel
from .prompt_model import ImageUpload, NewPromptInput, Prompt, PromptPatch, normalize_tags

__all__ = [
    "Collection",
    "GenerationModel",
    "ImageUpload",
    "NewPromptInput",
    "Prompt",
    "PromptPatch",
    "normalize_tags",
]
