"""Data models for messages, tool calls, completions and the orchestration session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


Role = Literal["system", "user", "assistant", "tool"]


# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments requested by the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = "{}"


class ToolCallRequest(BaseModel):
    """A single tool invocation emitted inside an assistant message."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "function"
    function: FunctionCall


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCallRequest, ...] | None = None
    tool_call_id: str | None = None
    name: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        # The gateway sends content=null on tool-call turns.
        return "" if value is None else value

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    @classmethod
    def tool_result(cls, tool_call_id: str, name: str, content: str) -> Message:
        return cls(role="tool", content=content, tool_call_id=tool_call_id, name=name)

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for the chat-completions API."""
        out: dict[str, Any] = {"role": self.role, "content": self.content or ""}
        if self.tool_calls:
            out["tool_calls"] = [tc.model_dump() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        if self.name is not None:
            out["name"] = self.name
        return out


# ---------------------------------------------------------------------------
# Completions
# ---------------------------------------------------------------------------


class Completion(BaseModel):
    """First choice of a chat-completions response."""

    message: Message
    finish_reason: str | None = None

    @property
    def requests_tools(self) -> bool:
        return self.finish_reason == "tool_calls" and bool(self.message.tool_calls)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@dataclass
class ToolResult:
    """Result of a single tool execution."""

    content: str


@dataclass
class ToolDef:
    """Tool definition for the orchestrator and LLM."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema (OpenAI-style)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class OrchestrationSession(BaseModel):
    """Working state of one orchestrator invocation. Never persisted."""

    conversation_id: str
    messages: list[Message] = Field(default_factory=list)
    iterations: int = 0

    @classmethod
    def start(cls, conversation_id: str, system_prompt: str, history: list[Message]) -> OrchestrationSession:
        """Build the working sequence: one system prompt followed by the caller history."""
        messages = [Message.system(system_prompt)]
        messages.extend(m for m in history if m.role != "system")
        return cls(conversation_id=conversation_id, messages=messages)

    def append(self, message: Message) -> None:
        self.messages.append(message)
