"""Utilities for loading the fixed system prompt from disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import DEFAULT_SYSTEM_PROMPT_PATH
from .errors import ConfigurationError

_cached_prompt: Optional[str] = None


def _read_file(path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"System prompt could not be read from {path}: {e}") from e
    return text.strip()


def get_default_system_prompt() -> str:
    """Return the assistant's system prompt text, cached after first read.

    Raises ConfigurationError if the prompt file is missing, unreadable or empty.
    """
    global _cached_prompt
    if _cached_prompt is None:
        text = _read_file(DEFAULT_SYSTEM_PROMPT_PATH)
        if not text:
            raise ConfigurationError(f"System prompt file {DEFAULT_SYSTEM_PROMPT_PATH} is empty")
        _cached_prompt = text
    return _cached_prompt
