"""LLM chain driving the business-profile interview.

The assistant replies with one JSON object per turn. Earlier assistant turns
are stored verbatim (the JSON text), so replaying them teaches the model the
reply format.
"""

from typing import Any

from app.core.errors import ActionInputError
from app.core.llm import complete_text, parse_llm_json

# ruff: noqa: E501
SYSTEM_PROMPT = """You are a friendly compliance consultant interviewing the owner of a small regulated business so you can build a profile of it. Ask ONE short question at a time. Ask at most 10 questions in total, then finish.

Every reply MUST be a single JSON object with this exact shape and nothing else:
{
  "message": "string - your next question, or a closing summary when done",
  "question_number": integer - the number of the question you are asking (1-based),
  "total_expected": integer - how many questions you expect to ask in total (at most 10),
  "done": boolean - true only when the interview is finished,
  "profile": null, or when done is true an object with:
    {
      "industry_subtype": string or null,
      "services": [string],
      "client_types": [string],
      "staff_count_range": string,
      "licensing_bodies": [string],
      "certifications_held": [string],
      "years_in_operation": integer or null,
      "special_considerations": [string],
      "has_existing_sops": boolean,
      "pain_points": [string]
    }
}

No markdown code fences, no commentary."""

OPENING_MESSAGE = "Please start the interview."


def build_messages(payload: dict[str, Any]) -> list[dict[str, str]]:
    """Build the Anthropic message list; always starts with a user turn."""
    location = payload.get("state") or "unknown state"
    if payload.get("county"):
        location = f"{payload['county']} County, {location}"
    opening = (
        f"Business industry: {payload.get('industry_type') or 'unknown'}\n"
        f"Location: {location}\n\n{OPENING_MESSAGE}"
    )

    messages = [{"role": "user", "content": opening}]
    for msg in payload.get("messages") or []:
        role = msg.get("role")
        content = msg.get("content") or ""
        if role not in ("assistant", "user"):
            continue
        if messages[-1]["role"] == role:
            # Anthropic requires alternating turns
            messages[-1]["content"] += f"\n\n{content}"
        else:
            messages.append({"role": role, "content": content})
    return messages


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Produce the next interview turn.

    Raises:
        ActionInputError: If messages is present but not a list
        json.JSONDecodeError: If the model reply is not JSON
    """
    if "messages" in payload and not isinstance(payload["messages"], list):
        raise ActionInputError("Missing required field: messages (array of chat messages)")

    text = await complete_text(SYSTEM_PROMPT, build_messages(payload))
    return parse_llm_json(text)
