"""Error taxonomy for the chat orchestrator.

Every failure the orchestrator can report is an ``OrchestrationError`` carrying
an ``ErrorKind`` and the HTTP status the chat endpoint answers with. Nothing in
this package retries; callers decide whether to try again.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION_ERROR = "configuration_error"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    GATEWAY_ERROR = "gateway_error"
    ITERATION_LIMIT_EXCEEDED = "iteration_limit_exceeded"
    MALFORMED_TOOL_ARGUMENTS = "malformed_tool_arguments"
    UNKNOWN_TOOL = "unknown_tool"
    ACCESS_DENIED = "access_denied"


class OrchestrationError(RuntimeError):
    """Base class for failures surfaced at the chat endpoint."""

    kind: ErrorKind = ErrorKind.GATEWAY_ERROR
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(OrchestrationError):
    kind = ErrorKind.CONFIGURATION_ERROR


class RateLimited(OrchestrationError):
    kind = ErrorKind.RATE_LIMITED
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.") -> None:
        super().__init__(message)


class QuotaExhausted(OrchestrationError):
    kind = ErrorKind.QUOTA_EXHAUSTED
    status_code = 402

    def __init__(self, message: str = "AI credits depleted. Please add credits to continue.") -> None:
        super().__init__(message)


class GatewayError(OrchestrationError):
    """Any other non-success answer from the completion gateway, or no answer at all."""

    kind = ErrorKind.GATEWAY_ERROR

    def __init__(self, upstream_status: int | None, body: str = "") -> None:
        if upstream_status is None:
            message = f"AI API error: {body}" if body else "AI API error"
        else:
            message = f"AI API error: {upstream_status}"
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


class IterationLimitExceeded(OrchestrationError):
    kind = ErrorKind.ITERATION_LIMIT_EXCEEDED

    def __init__(self, limit: int) -> None:
        super().__init__(f"Maximum tool call iterations reached ({limit})")
        self.limit = limit


class MalformedToolArguments(OrchestrationError):
    kind = ErrorKind.MALFORMED_TOOL_ARGUMENTS

    def __init__(self, tool_name: str, detail: str) -> None:
        super().__init__(f"Invalid arguments for tool '{tool_name}': {detail}")
        self.tool_name = tool_name


class UnknownTool(OrchestrationError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class AccessDenied(OrchestrationError):
    kind = ErrorKind.ACCESS_DENIED
    status_code = 403

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Access to conversation {conversation_id} denied")
        self.conversation_id = conversation_id
