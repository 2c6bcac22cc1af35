"""LLM chain for generating the compliance-source checklist of an organization."""

import json
from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json

# ruff: noqa: E501
SYSTEM_PROMPT = (
    "You are a regulatory compliance librarian. Given a business profile, list the compliance "
    "sources (laws, administrative rules, licensing guides, forms, internal policies) the owner "
    "should collect before writing SOPs. Prefer official government URLs for suggested sources. "
    "Return ONLY a valid JSON array. No markdown code fences, no commentary."
)


def build_prompt(payload: dict[str, Any]) -> str:
    location_parts = [payload.get("state") or ""]
    if payload.get("county"):
        location_parts.append(f"{payload['county']} County")
    if payload.get("city"):
        location_parts.append(payload["city"])

    return f"""Build a knowledge checklist for this business:

Industry: {payload["industry_type"]}
Location: {", ".join(p for p in location_parts if p)}
Business profile:
{json.dumps(payload.get("profile") or {}, indent=2)}

Return a JSON array of 8-20 objects with these fields:
- "title": name of the source to collect
- "description": one sentence on why it matters
- "type": "LINK" | "PDF" | "DOCUMENT" | "VOICE" | "OTHER"
- "priority": "REQUIRED" | "RECOMMENDED" | "OPTIONAL"
- "level": "federal" | "state" | "county" | "local" | "internal"
- "category": short compliance domain (e.g. "forms", "rules-and-policies", "employment-labor", "medicaid")
- "suggested_source": URL where it can be found, or null"""


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Generate checklist items.

    Raises:
        ActionInputError: If industry_type is missing
        json.JSONDecodeError: If the model reply is not JSON
    """
    if not payload.get("industry_type"):
        raise ActionInputError("Missing required field: industry_type")

    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": build_prompt(payload)}])
    return {"items": parse_llm_json(text)}
