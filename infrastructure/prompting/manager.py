"""
Prompt template loading and management.
Handles loading templates from disk and optionally registering them in the Opik prompt library.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

from opik import Prompt, PromptType

from infrastructure.io import ensure_exists, read_text

logger = logging.getLogger(__name__)

TEMPLATE_SUBDIR = "analysis"
TEMPLATE_SUFFIX = ".md"


@dataclass(frozen=True)
class LocalPrompt:
    """Lightweight prompt wrapper for disk-only prompting (no Opik prompt library writes)."""

    name: str
    prompt: str
    metadata: dict[str, Any]

    def format(self, **kwargs: Any) -> str:
        """Format the prompt template with variables using Mustache syntax."""
        rendered = self.prompt
        for k in sorted(kwargs, key=lambda x: len(str(x)), reverse=True):
            v = str(kwargs[k])
            placeholder = f"{{{{{k}}}}}"
            if placeholder in rendered:
                rendered = rendered.replace(placeholder, v)
            else:
                # Fallback to regex for whitespace tolerance
                pattern = re.compile(r"\{\{\s*" + re.escape(str(k)) + r"\s*\}\}")
                rendered = pattern.sub(lambda _m, v=v: v, rendered)
        return rendered


PromptObj: TypeAlias = Prompt | LocalPrompt


class PromptManager:
    """
    Loads prompt templates from disk and (optionally) registers them in the Opik prompt library.

    Templates are organized as:
        prompts/
        └─ analysis/
           ├─ taxonomy-prompt.md
           ├─ transcript-prompt.md
           └─ output-prompt.md
    """

    def __init__(self, prompts_root: Path, *, register_in_opik: bool = False):
        self.prompts_root = prompts_root
        self.register_in_opik = register_in_opik
        self._cache: dict[tuple[str, int, bool], PromptObj] = {}

    def template_path(self, name: str) -> Path:
        return self.prompts_root / TEMPLATE_SUBDIR / f"{name}{TEMPLATE_SUFFIX}"

    def get_template(self, name: str, *, fallback: str | None = None) -> PromptObj:
        """
        Load a template by name (e.g. ``"taxonomy-prompt"``).

        Args:
            name: Template file name without suffix
            fallback: Template text to use when the file is missing

        Returns:
            PromptObj exposing ``name``, ``prompt`` and ``format(**kwargs)``

        Raises:
            FileNotFoundError: If the file is missing and no fallback is given
            ValueError: If optional Opik registration fails
        """
        path = self.template_path(name)
        prompt_name = f"{TEMPLATE_SUBDIR}.{name}"

        if not path.exists() and fallback is not None:
            logger.warning("Prompt template %s not found; using built-in default for '%s'", path, name)
            return LocalPrompt(name=prompt_name, prompt=fallback, metadata={"source_path": None, "fallback": True})

        ensure_exists(path, f"{name} template")
        cache_key = (str(path), path.stat().st_mtime_ns, self.register_in_opik)
        if cache_key in self._cache:
            return self._cache[cache_key]

        text = read_text(path)
        metadata = {"source_path": str(path), "fallback": False}

        if self.register_in_opik:
            # Creates/versions the prompt in the Opik prompt library.
            try:
                prompt_obj: PromptObj = Prompt(
                    name=prompt_name,
                    prompt=text,
                    type=PromptType.MUSTACHE,
                    metadata=metadata,
                )
            except Exception as e:
                raise ValueError(f"Failed to create/register prompt '{prompt_name}' in Opik prompt library.") from e
        else:
            prompt_obj = LocalPrompt(name=prompt_name, prompt=text, metadata=metadata)

        self._cache[cache_key] = prompt_obj
        logger.info("Loaded prompt template %s as %s", path, prompt_name)
        return prompt_obj
