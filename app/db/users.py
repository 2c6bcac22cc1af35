"""Database operations for user profiles (the users table)."""

from typing import Optional
from uuid import UUID

from app.db.supabase_client import get_supabase


def get_user_profile(user_id: UUID | str) -> Optional[dict]:
    """Get a profile row by auth user ID."""
    client = get_supabase()
    result = client.table("users").select("*").eq("id", str(user_id)).limit(1).execute()
    if result.data:
        return result.data[0]
    return None


def ensure_user_profile(user_id: UUID | str, email: str, role: str) -> None:
    """
    Create the profile row if it does not exist yet.

    Single conditional upsert: concurrent first logins cannot create two rows
    and an existing row is never overwritten.
    """
    client = get_supabase()
    (
        client.table("users")
        .upsert(
            {"id": str(user_id), "email": email.lower(), "role": role},
            on_conflict="id",
            ignore_duplicates=True,
        )
        .execute()
    )


def set_user_org(user_id: UUID | str, org_id: UUID | str) -> Optional[dict]:
    """Attach a user to an organization."""
    client = get_supabase()
    result = (
        client.table("users")
        .update({"org_id": str(org_id)})
        .eq("id", str(user_id))
        .execute()
    )
    return result.data[0] if result.data else None
