"""LLM chain for auditing an SOP against regulations and best practice."""

from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json
from app.chains.recommend_sops import format_governing_bodies

# ruff: noqa: E501
SYSTEM_PROMPT = (
    "You are a regulatory compliance auditor specializing in Standard Operating Procedures for "
    "care facilities, healthcare providers, and related industries. Review SOPs against industry "
    "regulations, safety standards, and best practices. Identify gaps, risks, and areas needing "
    "improvement. Be thorough but practical and focus on findings that matter. Return ONLY a "
    "valid JSON array. No markdown code fences, no commentary, no explanation, just the raw JSON array."
)


def build_prompt(payload: dict[str, Any]) -> str:
    steps_text = "\n\n".join(
        f"Step {s.get('step_number')}: {s.get('title')}\n{s.get('description') or 'No description'}"
        for s in payload["steps"]
    )

    context_info = ""
    if payload.get("industry_type"):
        context_info += f"\nIndustry: {payload['industry_type']}"
    if payload.get("state"):
        context_info += f"\nLocation: {payload['state']}"
    if isinstance(payload.get("governing_bodies"), list) and payload["governing_bodies"]:
        context_info += f"\nGoverning bodies: {format_governing_bodies(payload['governing_bodies'])}"
    if payload.get("knowledge_context"):
        context_info += f"\nKnown business context: {payload['knowledge_context']}"

    business_context = f"\nBusiness context:{context_info}" if context_info else ""

    return f"""Review the following SOP for regulatory compliance issues, safety gaps, and best-practice violations:

SOP Title: {payload.get("sop_title") or "Untitled SOP"}
{business_context}

SOP Steps:
{steps_text}

Identify compliance findings: gaps, risks, or areas that need improvement. For each finding, specify severity and which step it relates to (or null if it's a general issue). Return a JSON array of objects with these fields:
- "finding_id": integer starting at 1
- "severity": "high" | "medium" | "low"
- "title": short description of the issue (1 sentence)
- "description": detailed explanation of why this is a compliance concern (2-3 sentences)
- "related_step": step number (integer) or null if general
- "recommendation": what the user should do to address this (1-2 sentences)"""


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Audit SOP steps and return findings.

    Raises:
        ActionInputError: If steps is missing or empty
        json.JSONDecodeError: If the model reply is not JSON
    """
    steps = payload.get("steps")
    if not isinstance(steps, list) or not steps:
        raise ActionInputError("Missing required field: steps (array of SOP steps)")

    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": build_prompt(payload)}])
    return {"findings": parse_llm_json(text)}
