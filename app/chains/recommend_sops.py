"""LLM chain for recommending SOPs for an organization."""

from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json

# ruff: noqa: E501
SYSTEM_PROMPT = (
    "You are a regulatory compliance expert specializing in Standard Operating Procedures "
    "for care facilities, healthcare providers, and related industries. Consider the specific "
    "industry type, geographic location, and governing bodies when recommending SOPs. "
    "Return ONLY a valid JSON array. No markdown code fences, no commentary, no explanation, "
    "just the raw JSON array."
)


def format_governing_bodies(governing_bodies: Any) -> str:
    """Render governing bodies as ``Name (level)`` joined by commas."""
    if not isinstance(governing_bodies, list) or not governing_bodies:
        return "None specified"
    return ", ".join(f"{gb.get('name')} ({gb.get('level')})" for gb in governing_bodies)


def build_prompt(payload: dict[str, Any]) -> str:
    location_parts = [payload["state"]]
    if payload.get("county"):
        location_parts.append(f"{payload['county']} County")

    return f"""Generate 8-12 recommended Standard Operating Procedures for the following business:

Industry: {payload["industry_type"]}
Location: {", ".join(location_parts)}
Governing bodies: {format_governing_bodies(payload.get("governing_bodies"))}

Return a JSON array of objects with these fields:
- "title": short SOP title
- "category": category grouping (e.g. "Health & Safety", "Administration", "Training", "Emergency", "Compliance")
- "description": one sentence explaining why this SOP matters for this business
- "sort_order": integer starting at 1"""


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Recommend SOPs for a business.

    Raises:
        ActionInputError: If industry_type or state is missing
        json.JSONDecodeError: If the model reply is not JSON
    """
    if not payload.get("industry_type") or not payload.get("state"):
        raise ActionInputError("Missing required fields: industry_type, state")

    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": build_prompt(payload)}])
    return {"recommendations": parse_llm_json(text)}
