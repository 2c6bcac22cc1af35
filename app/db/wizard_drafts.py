"""Keyed storage for in-progress SOP wizard input.

Keys are ``sop-context-{sopId}`` and ``sop-voice-{sopId}``. Writes are
last-write-wins with no merge; entries never expire.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def context_key(sop_id: UUID | str) -> str:
    return f"sop-context-{sop_id}"


def voice_key(sop_id: UUID | str) -> str:
    return f"sop-voice-{sop_id}"


def get_draft(org_id: UUID | str, key: str) -> Optional[str]:
    """Raw stored value for a key, or None."""
    client = get_supabase()
    result = (
        client.table("wizard_drafts")
        .select("value")
        .eq("key", key)
        .eq("org_id", str(org_id))
        .limit(1)
        .execute()
    )
    if result.data:
        return result.data[0].get("value")
    return None


def put_draft(org_id: UUID | str, key: str, value: str) -> None:
    """Overwrite the value stored under a key."""
    client = get_supabase()
    (
        client.table("wizard_drafts")
        .upsert(
            {
                "key": key,
                "org_id": str(org_id),
                "value": value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="key",
        )
        .execute()
    )
