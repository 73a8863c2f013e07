"""Chat router: the endpoint the Academic AI web client invokes for each turn."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from src.chat_orchestrator.access import ConversationAccessPolicy, RequireBearerPolicy, TrustCallerPolicy
from src.chat_orchestrator.config import Settings, load_settings
from src.chat_orchestrator.errors import OrchestrationError
from src.chat_orchestrator.llm import get_provider
from src.chat_orchestrator.loop import LoopOptions, handle
from src.chat_orchestrator.models import Message
from src.chat_orchestrator.providers import CompletionProvider
from src.chat_orchestrator.tools import ToolRegistry, get_default_tools

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[Message] = Field(default_factory=list, description="Conversation history, oldest first")
    conversation_id: str = Field(..., alias="conversationId", description="Conversation identifier, used for log correlation")


class ChatResponse(BaseModel):
    """Response for POST /chat."""

    response: str


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    return load_settings()


async def get_completion_provider(settings: Settings = Depends(get_settings)) -> CompletionProvider:
    return await get_provider(settings)


def get_tools() -> ToolRegistry:
    return get_default_tools()


def get_access_policy(settings: Settings = Depends(get_settings)) -> ConversationAccessPolicy:
    if settings.require_auth:
        return RequireBearerPolicy()
    return TrustCallerPolicy()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.options("")
async def chat_preflight() -> Response:
    """CORS preflight: empty body, permissive headers."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    settings: Settings = Depends(get_settings),
    provider: CompletionProvider = Depends(get_completion_provider),
    tools: ToolRegistry = Depends(get_tools),
    policy: ConversationAccessPolicy = Depends(get_access_policy),
    authorization: str | None = Header(None),
) -> JSONResponse:
    """Run the chat loop and return the assistant reply."""
    opts = LoopOptions(
        provider=provider,
        model=settings.model,
        max_tool_iterations=settings.max_tool_iterations,
    )
    try:
        await policy.check(authorization, request.conversation_id)
        reply = await handle(request.messages, request.conversation_id, tools=tools, options=opts)
    except OrchestrationError as e:
        logger.error("Chat error (%s): %s", e.kind.value, e.message)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Chat error")
        return error_response(500, str(e) or "Unknown error")
    logger.info("Successfully generated AI response")
    return JSONResponse(ChatResponse(response=reply).model_dump(), headers=CORS_HEADERS)


# ---------------------------------------------------------------------------
# Error handlers for failures raised before the route body runs
# ---------------------------------------------------------------------------


async def _orchestration_error_handler(request: Request, exc: OrchestrationError) -> JSONResponse:
    logger.error("Chat error (%s): %s", exc.kind.value, exc.message)
    return error_response(exc.status_code, exc.message)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.error("Malformed chat request: %s", details)
    return error_response(500, f"Invalid request: {details}")


def install_error_handlers(app: FastAPI) -> None:
    """Map configuration and validation failures to the endpoint's {error} shape."""
    app.add_exception_handler(OrchestrationError, _orchestration_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
