"""Supabase clients for the data layer and for end-user auth calls."""

from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings


def _build_client(key: str, purpose: str) -> Client:
    settings = get_settings()
    try:
        return create_client(settings.SUPABASE_URL, key)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase {purpose} client: {e}") from e


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Get the service-role client shared by every app.db module.

    Row-level policies are bypassed with this key, so each data-layer
    function scopes its queries by org_id itself.

    Raises:
        RuntimeError: If client initialization fails
    """
    return _build_client(get_settings().SUPABASE_SERVICE_ROLE_KEY, "data")


def get_auth_client() -> Client:
    """
    Get a fresh client for sign-in, sign-up and password flows.

    These calls mutate the client's auth state, so a new client is built per
    call with the anon key (the service key is used when no anon key is set).
    """
    settings = get_settings()
    return _build_client(settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY, "auth")
