"""LLM chain for breaking a described process into SOP steps."""

from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json

# ruff: noqa: E501
SYSTEM_PROMPT = (
    "You are an SOP writing expert. Break the described process into clear, actionable, "
    "numbered steps. Each step should have a concise title and a detailed description. "
    "Keep steps specific and actionable. Use the provided context and regulations to inform "
    "the steps, but focus primarily on the user's described process. Return ONLY a valid JSON "
    "array. No markdown code fences, no commentary, no explanation, just the raw JSON array."
)


def build_prompt(payload: dict[str, Any]) -> str:
    context_section = ""
    links = payload.get("context_links")
    if isinstance(links, list) and links:
        link_lines = "\n".join(f"- {link.get('label', '')}: {link.get('url', '')}" for link in links)
        context_section = f"\n\nReference links:\n{link_lines}"

    regulation_section = ""
    if payload.get("regulation_text"):
        regulation_section = f"\n\nRelevant regulation text:\n{payload['regulation_text']}"

    knowledge_section = ""
    if payload.get("knowledge_context"):
        knowledge_section = f"\n\nWhat we know about this business:\n{payload['knowledge_context']}"

    return f"""Generate structured SOP steps for the following process:

SOP Title: {payload.get("sop_title") or "Untitled SOP"}

Process description (from user):
{payload["transcript"]}{context_section}{regulation_section}{knowledge_section}

Break this process into clear, numbered steps. Return a JSON array of objects with these fields:
- "step_number": integer starting at 1
- "title": concise step title (imperative verb, e.g. "Verify patient identity")
- "description": detailed description of what to do in this step (2-4 sentences)"""


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Generate SOP steps from a transcript plus optional context.

    Raises:
        ActionInputError: If transcript is missing
        json.JSONDecodeError: If the model reply is not JSON
    """
    if not payload.get("transcript"):
        raise ActionInputError("Missing required field: transcript")

    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": build_prompt(payload)}])
    return {"steps": parse_llm_json(text)}
