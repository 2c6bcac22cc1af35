"""Database operations for governing bodies of an organization."""

from datetime import datetime, timezone
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_governing_bodies(org_id: UUID | str) -> list[dict]:
    """List live governing bodies for an org, oldest first."""
    client = get_supabase()
    result = (
        client.table("governing_bodies")
        .select("*")
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .order("created_at")
        .execute()
    )
    return result.data or []


def insert_governing_bodies(org_id: UUID | str, bodies: list[dict]) -> list[dict]:
    """Insert governing bodies for an org. Empty input is a no-op."""
    if not bodies:
        return []
    client = get_supabase()
    rows = [
        {
            "org_id": str(org_id),
            "name": body["name"],
            "level": body["level"],
            "url": body.get("url") or None,
        }
        for body in bodies
    ]
    result = client.table("governing_bodies").insert(rows).execute()
    return result.data or []


def soft_delete_governing_bodies(org_id: UUID | str) -> int:
    """Soft-delete every live governing body of an org. Returns rows touched."""
    client = get_supabase()
    result = (
        client.table("governing_bodies")
        .update({"deleted_at": datetime.now(timezone.utc).isoformat()})
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return len(result.data or [])
