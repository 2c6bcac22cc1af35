"""Database operations for SOP steps.

Steps are ordered by ``step_number``; the key space is not dense and is only
ever changed by swapping two rows' keys.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_steps(sop_id: UUID | str) -> list[dict]:
    """List live steps of an SOP ordered by step_number."""
    client = get_supabase()
    result = (
        client.table("sop_steps")
        .select("*")
        .eq("sop_id", str(sop_id))
        .is_("deleted_at", "null")
        .order("step_number")
        .execute()
    )
    return result.data or []


def insert_steps(sop_id: UUID | str, steps: list[dict]) -> list[dict]:
    """Bulk insert steps in one statement."""
    if not steps:
        return []
    client = get_supabase()
    rows = [
        {
            "sop_id": str(sop_id),
            "step_number": step["step_number"],
            "title": step["title"],
            "description": step.get("description") or None,
        }
        for step in steps
    ]
    result = client.table("sop_steps").insert(rows).execute()
    return result.data or []


def update_step(sop_id: UUID | str, step_id: UUID | str, updates: dict) -> Optional[dict]:
    """Update a live step of an SOP."""
    client = get_supabase()
    result = (
        client.table("sop_steps")
        .update(updates)
        .eq("id", str(step_id))
        .eq("sop_id", str(sop_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return result.data[0] if result.data else None


def soft_delete_step(sop_id: UUID | str, step_id: UUID | str) -> bool:
    """Soft-delete a step."""
    return update_step(
        sop_id, step_id, {"deleted_at": datetime.now(timezone.utc).isoformat()}
    ) is not None
