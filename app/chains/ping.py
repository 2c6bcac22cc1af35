"""Connectivity check action for the AI proxy."""

from typing import Any

from app.core.llm import complete_text

SYSTEM_PROMPT = "You are a helpful assistant. Keep responses concise."


async def run(payload: dict[str, Any]) -> dict[str, Any]:
    """Send a free-form prompt and return the raw text."""
    prompt = payload.get("prompt") or "Say hello"
    text = await complete_text(SYSTEM_PROMPT, [{"role": "user", "content": prompt}], max_tokens=1024)
    return {"response": text}
