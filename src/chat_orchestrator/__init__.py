"""Chat orchestrator: system prompt + gateway + web_search tool loop for Academic AI."""

from .access import ConversationAccessPolicy, RequireBearerPolicy, TrustCallerPolicy
from .config import Settings, load_settings
from .errors import (
    AccessDenied,
    ConfigurationError,
    ErrorKind,
    GatewayError,
    IterationLimitExceeded,
    MalformedToolArguments,
    OrchestrationError,
    QuotaExhausted,
    RateLimited,
    UnknownTool,
)
from .llm import get_provider
from .loop import LoopOptions, handle, run_session
from .models import Completion, FunctionCall, Message, OrchestrationSession, ToolCallRequest
from .providers import CompletionProvider, OpenAIProvider
from .search import SearchProvider, StubSearchProvider
from .tools import BaseTool, ToolRegistry, WebSearchTool, get_default_tools

__all__ = [
    "handle",
    "run_session",
    "LoopOptions",
    "Settings",
    "load_settings",
    "get_provider",
    "Message",
    "Completion",
    "FunctionCall",
    "ToolCallRequest",
    "OrchestrationSession",
    "CompletionProvider",
    "OpenAIProvider",
    "SearchProvider",
    "StubSearchProvider",
    "BaseTool",
    "ToolRegistry",
    "WebSearchTool",
    "get_default_tools",
    "ConversationAccessPolicy",
    "TrustCallerPolicy",
    "RequireBearerPolicy",
    "ErrorKind",
    "OrchestrationError",
    "ConfigurationError",
    "RateLimited",
    "QuotaExhausted",
    "GatewayError",
    "IterationLimitExceeded",
    "MalformedToolArguments",
    "UnknownTool",
    "AccessDenied",
]
