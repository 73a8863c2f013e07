"""Abstract completion provider interface for the chat orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..models import Completion, Message


class CompletionProvider(ABC):
    """
    Abstract completion gateway. Implement this to plug in any OpenAI-style backend.

    The orchestrator only depends on this interface.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Completion:
        """
        One chat-completions round-trip. Returns the first choice.

        Raises RateLimited, QuotaExhausted or GatewayError on failure.
        """
        ...
