"""Database operations for knowledge checklist items."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_knowledge_items(org_id: UUID | str) -> list[dict]:
    """List live knowledge items for an org by sort_order."""
    client = get_supabase()
    result = (
        client.table("knowledge_items")
        .select("*")
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .order("sort_order")
        .execute()
    )
    return result.data or []


def get_knowledge_item(org_id: UUID | str, item_id: UUID | str) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("knowledge_items")
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


def insert_knowledge_items(org_id: UUID | str, items: list[dict]) -> list[dict]:
    """Bulk insert items; status defaults to pending."""
    if not items:
        return []
    client = get_supabase()
    rows = [{"status": "pending", **item, "org_id": str(org_id)} for item in items]
    result = client.table("knowledge_items").insert(rows).execute()
    return result.data or []


def update_knowledge_item(
    org_id: UUID | str, item_id: UUID | str, updates: dict
) -> Optional[dict]:
    """Single-item update; returns the stored row or None if nothing matched."""
    client = get_supabase()
    result = (
        client.table("knowledge_items")
        .update({**updates, "updated_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(item_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return result.data[0] if result.data else None


def soft_delete_knowledge_item(org_id: UUID | str, item_id: UUID | str) -> bool:
    """Soft-delete a knowledge item."""
    client = get_supabase()
    result = (
        client.table("knowledge_items")
        .update({"deleted_at": datetime.now(timezone.utc).isoformat()})
        .eq("id", str(item_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .execute()
    )
    return len(result.data or []) > 0
