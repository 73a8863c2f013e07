"""Main chat–tool loop orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DEFAULT_MAX_TOOL_ITERATIONS, DEFAULT_MODEL, load_settings
from .errors import IterationLimitExceeded
from .llm import complete, get_provider
from .models import Message, OrchestrationSession
from .providers import CompletionProvider
from .system_prompt_loader import get_default_system_prompt
from .tools import ToolRegistry, get_default_tools

logger = logging.getLogger(__name__)


@dataclass
class LoopOptions:
    """Options for the chat loop."""

    provider: CompletionProvider
    model: str = DEFAULT_MODEL
    max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS
    system_prompt: str | None = None


async def run_session(
    session: OrchestrationSession,
    tools: ToolRegistry,
    options: LoopOptions,
) -> str:
    """
    Drive an already-started session: gateway → tools → gateway … until the
    model answers without requesting tools.

    Each iteration is one gateway round-trip. Raises IterationLimitExceeded
    when ``options.max_tool_iterations`` round-trips all requested tools.
    """
    tool_schemas = tools.schemas()
    while session.iterations < options.max_tool_iterations:
        session.iterations += 1
        logger.info(
            "Conversation %s: gateway call %d/%d",
            session.conversation_id,
            session.iterations,
            options.max_tool_iterations,
        )
        completion = await complete(
            session.messages,
            provider=options.provider,
            model=options.model,
            tools=tool_schemas or None,
        )
        assistant = completion.message
        session.append(assistant)

        if not completion.requests_tools:
            logger.info("Conversation %s: answered after %d gateway call(s)", session.conversation_id, session.iterations)
            return assistant.content

        logger.info(
            "Conversation %s: model requested tools %s",
            session.conversation_id,
            [tc.function.name for tc in assistant.tool_calls or ()],
        )
        for call in assistant.tool_calls or ():
            session.append(await tools.dispatch(call))

    logger.error(
        "Conversation %s: no final answer after %d gateway calls",
        session.conversation_id,
        options.max_tool_iterations,
    )
    raise IterationLimitExceeded(options.max_tool_iterations)


async def handle(
    history: list[Message],
    conversation_id: str,
    *,
    tools: ToolRegistry | None = None,
    options: LoopOptions | None = None,
) -> str:
    """
    Answer the latest turn of a conversation.

    ``history`` is the caller's ordered message list, oldest first; it may be
    empty. Nothing is persisted: the caller stores both the user's message and
    the returned answer. Without ``options`` the gateway settings come from the
    environment, so a missing key raises ConfigurationError before any request.

    Returns:
        the assistant's final text
    """
    if options is None:
        settings = load_settings()
        options = LoopOptions(
            provider=await get_provider(settings),
            model=settings.model,
            max_tool_iterations=settings.max_tool_iterations,
        )
    tools = tools if tools is not None else get_default_tools()
    system_prompt = options.system_prompt or get_default_system_prompt()
    logger.info("Processing chat request for conversation: %s", conversation_id)
    session = OrchestrationSession.start(conversation_id, system_prompt, history)
    return await run_session(session, tools, options)
