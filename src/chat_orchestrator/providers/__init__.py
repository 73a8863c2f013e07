"""Completion providers: pluggable gateways for the chat orchestrator."""

from .base import CompletionProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "CompletionProvider",
    "OpenAIProvider",
]
