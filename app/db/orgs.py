"""Database operations for organizations."""

from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def get_org(org_id: UUID | str) -> Optional[dict]:
    """Get an organization by ID."""
    client = get_supabase()
    result = client.table("orgs").select("*").eq("id", str(org_id)).limit(1).execute()
    if result.data:
        return result.data[0]
    return None


def create_org(fields: dict, created_by: UUID | str) -> dict:
    """Create a new organization owned by ``created_by``."""
    client = get_supabase()
    data = {**fields, "created_by": str(created_by)}
    result = client.table("orgs").insert(data).execute()
    return result.data[0] if result.data else {}


def update_org(org_id: UUID | str, updates: dict) -> Optional[dict]:
    """Update organization fields."""
    client = get_supabase()
    result = client.table("orgs").update(updates).eq("id", str(org_id)).execute()
    return result.data[0] if result.data else None
