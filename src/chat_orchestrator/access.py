"""Conversation access checks, delegated to the identity service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .errors import AccessDenied


class ConversationAccessPolicy(ABC):
    """Decides whether the caller behind ``authorization`` may use a conversation."""

    @abstractmethod
    async def check(self, authorization: str | None, conversation_id: str) -> None:
        """Return normally if allowed; raise AccessDenied otherwise."""
        ...


class TrustCallerPolicy(ConversationAccessPolicy):
    """Accepts every caller. The conversation id is used for log correlation only."""

    async def check(self, authorization: str | None, conversation_id: str) -> None:
        return None


class RequireBearerPolicy(ConversationAccessPolicy):
    """Rejects requests that carry no bearer token at all.

    Token validation and conversation ownership stay with the identity service;
    this only enforces that the caller presented something for it to validate.
    """

    async def check(self, authorization: str | None, conversation_id: str) -> None:
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AccessDenied(conversation_id)
