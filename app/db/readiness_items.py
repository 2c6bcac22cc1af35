"""Database operations for manager readiness items."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_readiness_items(org_id: UUID | str) -> list[dict]:
    client = get_supabase()
    result = (
        client.table("manager_readiness_items")
        .select("*")
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .order("sort_order")
        .execute()
    )
    return result.data or []


def get_readiness_item(org_id: UUID | str, item_id: UUID | str) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("manager_readiness_items")
        .select("*")
        .eq("id", str(item_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0]
    return None


def insert_readiness_items(org_id: UUID | str, items: list[dict]) -> list[dict]:
    if not items:
        return []
    client = get_supabase()
    rows = [{**item, "org_id": str(org_id)} for item in items]
    result = client.table("manager_readiness_items").insert(rows).execute()
    return result.data or []


def update_readiness_item(
    org_id: UUID | str, item_id: UUID | str, updates: dict
) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("manager_readiness_items")
        .update({**updates, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(item_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return result.data[0] if result.data else None


def soft_delete_readiness_item(org_id: UUID | str, item_id: UUID | str) -> bool:
    return update_readiness_item(
        org_id, item_id, {"deleted_at": datetime.now(timezone.utc).isoformat()}
    ) is not None
