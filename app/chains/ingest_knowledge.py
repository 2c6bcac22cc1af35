"""LLM chain that synthesizes provided knowledge items into a knowledge base."""

import json
from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json

# ruff: noqa: E501
SYSTEM_PROMPT = (
    "You are a compliance analyst. Read the sources a business has provided and write a concise "
    "knowledge-base summary that later AI calls can use as context when drafting and auditing "
    "SOPs. Return ONLY a valid JSON object. No markdown code fences, no commentary."
)

MAX_SOURCE_CHARS = 4000


def render_source(item: dict[str, Any]) -> str:
    """Render one provided item; long text content is truncated."""
    content = (
        item.get("provided_text")
        or item.get("provided_transcript")
        or item.get("provided_url")
        or item.get("provided_file")
        or ""
    )
    if len(content) > MAX_SOURCE_CHARS:
        content = content[:MAX_SOURCE_CHARS] + "..."
    return (
        f"### {item.get('title', 'Untitled')} [{item.get('type', 'OTHER')}, {item.get('level', 'internal')}]\n"
        f"{item.get('description') or ''}\n{content}"
    )


def build_prompt(payload: dict[str, Any]) -> str:
    sources = "\n\n".join(render_source(item) for item in payload["items"])
    return f"""Business profile:
{json.dumps(payload.get("profile") or {}, indent=2)}

Provided sources:
{sources}

Return a JSON object with these fields:
- "summary": 3-6 paragraphs describing the regulatory obligations and operating context of this business
- "learned_topics": array of short topic labels covered by the sources"""


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Synthesize a knowledge base from provided items.

    Raises:
        ActionInputError: If items is missing or empty
        json.JSONDecodeError: If the model reply is not JSON
    """
    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise ActionInputError("Missing required field: items (array of provided knowledge items)")

    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": build_prompt(payload)}])
    return parse_llm_json(text)
