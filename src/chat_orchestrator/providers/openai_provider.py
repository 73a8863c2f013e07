"""OpenAI-compatible completion gateway provider."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS
from ..errors import GatewayError, QuotaExhausted, RateLimited
from ..models import Completion, FunctionCall, Message, ToolCallRequest
from .base import CompletionProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(CompletionProvider):
    """Chat Completions client for the hosted AI gateway.

    The underlying client is created with ``max_retries=0``: a 429 or 402 from
    the gateway is reported to the caller on the first occurrence.
    """

    def __init__(
        self,
        api_key: str,
        default_model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.default_model = default_model
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self._client:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()

    @staticmethod
    def _parse_tool_calls(choice_message: Any) -> list[ToolCallRequest]:
        """Map OpenAI tool_calls into ToolCallRequest models."""
        tool_calls: list[ToolCallRequest] = []
        for tc in getattr(choice_message, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            tool_calls.append(
                ToolCallRequest(
                    id=getattr(tc, "id", "") or "",
                    type=getattr(tc, "type", "function") or "function",
                    function=FunctionCall(
                        name=getattr(fn, "name", "") or "",
                        arguments=getattr(fn, "arguments", None) or "{}",
                    ),
                )
            )
        return tool_calls

    @staticmethod
    def _map_status_error(exc: openai.APIStatusError) -> Exception:
        body = exc.response.text if exc.response is not None else str(exc.body or "")
        logger.error("AI API error: %s %s", exc.status_code, body)
        if exc.status_code == 429:
            return RateLimited()
        if exc.status_code == 402:
            return QuotaExhausted()
        return GatewayError(exc.status_code, body)

    async def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> Completion:
        """Non-streaming chat completion; returns the first choice."""
        client = self._get_client()
        params: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": [m.to_chat_dict() for m in messages],
            **kwargs,
        }
        if tools:
            params["tools"] = tools

        try:
            resp = await client.chat.completions.create(**params)
        except openai.APIStatusError as e:
            raise self._map_status_error(e) from e
        except openai.APITimeoutError as e:
            logger.error("AI API timed out after %ss", self.timeout)
            raise GatewayError(None, "request timed out") from e
        except openai.APIConnectionError as e:
            logger.error("AI API connection failed: %s", e)
            raise GatewayError(None, str(e)) from e

        if not resp.choices:
            raise GatewayError(None, "response contained no choices")

        choice = resp.choices[0]
        tool_calls = self._parse_tool_calls(choice.message)
        message = Message(
            role="assistant",
            content=choice.message.content,
            tool_calls=tool_calls or None,
        )
        return Completion(message=message, finish_reason=choice.finish_reason)
