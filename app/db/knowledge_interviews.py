"""Database operations for knowledge interviews."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def get_latest_interview(org_id: UUID | str) -> Optional[dict]:
    """Most recently created interview of an org."""
    client = get_supabase()
    result = (
        client.table("knowledge_interviews")
        .select("*")
        .eq("org_id", str(org_id))
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0]
    return None


def create_interview(org_id: UUID | str) -> dict:
    client = get_supabase()
    result = (
        client.table("knowledge_interviews")
        .insert({"org_id": str(org_id), "status": "in_progress", "messages": []})
        .execute()
    )
    return result.data[0] if result.data else {}


def update_interview(
    org_id: UUID | str, interview_id: UUID | str, updates: dict
) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("knowledge_interviews")
        .update({**updates, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(interview_id))
        .eq("org_id", str(org_id))
        .execute()
    )
    return result.data[0] if result.data else None
