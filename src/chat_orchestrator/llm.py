"""LLM facade: provider cache and convenience functions for the orchestrator."""

from __future__ import annotations

from typing import Any

from .config import Settings
from .models import Completion, Message
from .providers import CompletionProvider, OpenAIProvider

# One provider per gateway endpoint; the API key is not part of the key.
_provider_cache: dict[tuple[str, str, float], OpenAIProvider] = {}


async def get_provider(settings: Settings) -> CompletionProvider:
    """Return the gateway provider for these settings, reusing its HTTP client across requests.

    When the API key has changed since the cached provider was built, the old
    provider's client is closed and replaced.
    """
    key = (settings.base_url, settings.model, settings.timeout)
    provider = _provider_cache.get(key)
    if provider is not None and provider.api_key == settings.api_key:
        return provider
    if provider is not None:
        await provider.aclose()
    provider = OpenAIProvider(
        api_key=settings.api_key,
        default_model=settings.model,
        base_url=settings.base_url,
        timeout=settings.timeout,
    )
    _provider_cache[key] = provider
    return provider


async def clear_provider_cache() -> None:
    """Close and forget every cached provider."""
    providers = list(_provider_cache.values())
    _provider_cache.clear()
    for provider in providers:
        await provider.aclose()


async def complete(
    messages: list[Message],
    provider: CompletionProvider,
    model: str | None = None,
    tools: list[dict[str, Any]] | None = None,
    **kwargs: Any,
) -> Completion:
    """Non-streaming completion through the given provider."""
    return await provider.complete(messages, model=model, tools=tools, **kwargs)
