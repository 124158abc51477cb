"""
Prompt management: loading templates from disk and Opik integration.

Handles:
- Loading prompt templates from filesystem
- Optional registration in Opik prompt library
- Mustache-style template rendering
"""

from infrastructure.prompting.manager import (
    LocalPrompt,
    PromptManager,
    PromptObj,
)

__all__ = [
    "PromptManager",
    "LocalPrompt",
    "PromptObj",
]
