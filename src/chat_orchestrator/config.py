"""Orchestrator configuration: gateway settings and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent
PROMPTS_DIR = PACKAGE_DIR / "prompts"
DEFAULT_SYSTEM_PROMPT_PATH = PROMPTS_DIR / "academic_assistant_system_prompt.md"

API_KEY_ENV = "LOVABLE_API_KEY"
DEFAULT_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_TOOL_ITERATIONS = 5


@dataclass(frozen=True)
class Settings:
    """Settings for one orchestrator invocation."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_tool_iterations: int = DEFAULT_MAX_TOOL_ITERATIONS
    require_auth: bool = False


def _env_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings() -> Settings:
    """Read settings from the process environment.

    Called once per invocation. Raises ConfigurationError when the gateway
    key is absent or a numeric override does not parse.
    """
    api_key = (os.getenv(API_KEY_ENV) or "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} is not configured")
    return Settings(
        api_key=api_key,
        base_url=os.getenv("AI_GATEWAY_BASE_URL") or DEFAULT_BASE_URL,
        model=os.getenv("AI_GATEWAY_MODEL") or DEFAULT_MODEL,
        timeout=float(_env_number("AI_GATEWAY_TIMEOUT", DEFAULT_TIMEOUT_SECONDS, float)),
        max_tool_iterations=int(_env_number("CHAT_MAX_TOOL_ITERATIONS", DEFAULT_MAX_TOOL_ITERATIONS, int)),
        require_auth=(os.getenv("CHAT_REQUIRE_AUTH") or "").strip().lower() in ("1", "true", "yes"),
    )
