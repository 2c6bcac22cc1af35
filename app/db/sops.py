"""Database operations for SOPs."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_sops(org_id: UUID | str) -> list[dict]:
    """List live SOPs for an org, most recently updated first."""
    client = get_supabase()
    result = (
        client.table("sops")
        .select("*")
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .order("updated_at", desc=True)
        .execute()
    )
    return result.data or []


def get_sop(org_id: UUID | str, sop_id: UUID | str) -> Optional[dict]:
    """Get a live SOP by ID within an org."""
    client = get_supabase()
    result = (
        client.table("sops")
        .select("*")
        .eq("id", str(sop_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0]
    return None


def create_sop(org_id: UUID | str, created_by: UUID | str, fields: dict) -> dict:
    """Create a draft SOP."""
    client = get_supabase()
    data = {
        "org_id": str(org_id),
        "created_by": str(created_by),
        "status": "draft",
        "title": fields["title"],
        "category": fields.get("category") or None,
        "purpose": fields.get("purpose") or None,
        "frequency": fields.get("frequency") or None,
    }
    result = client.table("sops").insert(data).execute()
    return result.data[0] if result.data else {}


def update_sop(org_id: UUID | str, sop_id: UUID | str, updates: dict) -> Optional[dict]:
    """Update SOP fields; ``updated_at`` is always bumped."""
    client = get_supabase()
    result = (
        client.table("sops")
        .update({**updates, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(sop_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return result.data[0] if result.data else None


def soft_delete_sop(org_id: UUID | str, sop_id: UUID | str) -> bool:
    """Soft-delete an SOP."""
    client = get_supabase()
    result = (
        client.table("sops")
        .update({"deleted_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(sop_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return len(result.data or []) > 0
