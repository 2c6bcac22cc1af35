"""Database operations for the per-org knowledge base summary."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def get_knowledge_base(org_id: UUID | str) -> Optional[dict]:
    client = get_supabase()
    result = (
        client.table("knowledge_base")
        .select("*")
        .eq("org_id", str(org_id))
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0]
    return None


def get_knowledge_summary(org_id: UUID | str) -> Optional[str]:
    """Summary of a completed knowledge base, or None if not built yet."""
    client = get_supabase()
    result = (
        client.table("knowledge_base")
        .select("summary")
        .eq("org_id", str(org_id))
        .eq("status", "complete")
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0].get("summary")
    return None


def upsert_knowledge_base(
    org_id: UUID | str,
    summary: str,
    learned_topics: list[str],
    source_count: int,
) -> dict:
    """
    Write the org's knowledge base in one statement.

    Relies on the unique constraint on ``knowledge_base.org_id``; two builders
    racing each other both land on the same row.
    """
    client = get_supabase()
    row = {
        "org_id": str(org_id),
        "summary": summary,
        "learned_topics": learned_topics,
        "source_count": source_count,
        "status": "complete",
        "built_at": datetime.now(timezone.utc).isoformat(),
    }
    result = client.table("knowledge_base").upsert(row, on_conflict="org_id").execute()
    return result.data[0] if result.data else row
