"""Database operations for SOP recommendations."""

from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def list_recommendations(org_id: UUID | str) -> list[dict]:
    """List live recommendations for an org by sort_order."""
    client = get_supabase()
    result = (
        client.table("sop_recommendations")
        .select("*")
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .order("sort_order")
        .execute()
    )
    return result.data or []


def get_recommendation(org_id: UUID | str, recommendation_id: UUID | str) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("sop_recommendations")
        .select("*")
        .eq("id", str(recommendation_id))
        .eq("org_id", str(org_id))
        .is_("deleted_at", "null")
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0]
    return None


def insert_recommendations(org_id: UUID | str, recommendations: list[dict]) -> list[dict]:
    """Bulk insert suggested recommendations."""
    if not recommendations:
        return []
    client = get_supabase()
    rows = [
        {
            "org_id": str(org_id),
            "title": rec["title"],
            "category": rec.get("category"),
            "description": rec.get("description"),
            "sort_order": rec.get("sort_order") or index + 1,
            "status": "suggested",
        }
        for index, rec in enumerate(recommendations)
    ]
    result = client.table("sop_recommendations").insert(rows).execute()
    return result.data or []


def mark_recommendation_started(
    org_id: UUID | str, recommendation_id: UUID | str, sop_id: UUID | str
) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("sop_recommendations")
        .update({"status": "started", "sop_id": str(sop_id)})
        .eq("id", str(recommendation_id))
        .eq("org_id", str(org_id))
        .execute()
    )
    return result.data[0] if result.data else None
