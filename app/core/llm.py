"""LLM client utilities for the AI proxy."""

import json
import re
from typing import Any

from anthropic import AsyncAnthropic

from app.core.config import get_settings


def get_llm_client() -> AsyncAnthropic:
    """
    Get an Anthropic client configured from settings.

    Returns:
        AsyncAnthropic instance

    Raises:
        RuntimeError: If no API key is configured
    """
    settings = get_settings()
    if not settings.ANTHROPIC_API_KEY:
        raise RuntimeError("ANTHROPIC_API_KEY is not configured")
    return AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)


async def complete_text(
    system: str,
    messages: list[dict[str, Any]],
    max_tokens: int | None = None,
    model: str | None = None,
) -> str:
    """
    Run one completion and return the text of the first content block.

    Args:
        system: System prompt
        messages: Anthropic-style message list
        max_tokens: Completion budget override (defaults to config setting)
        model: Model override (defaults to config setting)

    Returns:
        Raw text, or "" when the first block is not text
    """
    settings = get_settings()
    client = get_llm_client()
    response = await client.messages.create(
        model=model or settings.AI_MODEL,
        max_tokens=max_tokens or settings.AI_MAX_TOKENS,
        system=system,
        messages=messages,
    )
    if not response.content:
        return ""
    block = response.content[0]
    return block.text if getattr(block, "type", None) == "text" else ""


def _strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    # Extract JSON from markdown code fences
    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    # Fallback: strip leading/trailing fences without regex
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_llm_json(raw_output: str) -> Any:
    """
    Parse LLM output as JSON (object or array).

    Args:
        raw_output: Raw string from LLM response

    Returns:
        Parsed JSON value

    Raises:
        json.JSONDecodeError: If JSON parsing fails after cleanup
    """
    return json.loads(_strip_llm_fences(raw_output))
