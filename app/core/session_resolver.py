"""Session and profile resolution.

Turns an access token into ``{session, profile}``. Profile rows are
fetched-or-created with one conditional upsert, so two first requests racing
each other cannot create duplicate rows. Profile failures never block the
session: the caller ends up "logged in, profile unavailable".
"""

import asyncio
import logging
from typing import Optional

from app.core.logging import clear_log_context, get_logger, log_event, set_log_context
from app.core.schemas_auth import DEFAULT_ROLE, ResolvedSession, Session, UserProfile
from app.core.schemas_knowledge import KNOWLEDGE_BASE_COMPLETE
from app.db.knowledge_base import get_knowledge_base
from app.db.supabase_client import get_supabase
from app.db.users import ensure_user_profile, get_user_profile

logger = get_logger(__name__)


def get_session(token: str) -> Optional[Session]:
    """
    Validate an access token with Supabase Auth.

    Returns:
        Session, or None if the token is missing, invalid or expired
    """
    if not token:
        return None
    try:
        auth_response = get_supabase().auth.get_user(token)
    except Exception as e:
        log_event(logger, logging.INFO, "auth_token_rejected", message=str(e))
        return None

    if not auth_response or not auth_response.user:
        return None

    user = auth_response.user
    return Session(user_id=str(user.id), email=user.email or "", access_token=token)


def fetch_or_create_profile(user_id: str, email: str) -> UserProfile:
    """
    Fetch the caller's profile, creating it with the default role if absent.

    Raises:
        Exception: Any data-store failure other than "row not found"
    """
    row = get_user_profile(user_id)
    if row:
        log_event(logger, logging.INFO, "user_profile_fetched", user_id=user_id, org_id=row.get("org_id"))
        return UserProfile(**row)

    ensure_user_profile(user_id, email, DEFAULT_ROLE.value)
    row = get_user_profile(user_id)
    if not row:
        raise RuntimeError(f"Profile for {user_id} missing after create")

    log_event(logger, logging.INFO, "user_profile_created", user_id=user_id)
    return UserProfile(**row)


def has_knowledge_base(org_id: Optional[str]) -> bool:
    if not org_id:
        return False
    kb = get_knowledge_base(org_id)
    return bool(kb) and kb.get("status") == KNOWLEDGE_BASE_COMPLETE


def _resolve_profile(session: Session) -> tuple[Optional[UserProfile], bool]:
    try:
        profile = fetch_or_create_profile(session.user_id, session.email)
    except Exception as e:
        log_event(logger, logging.ERROR, "user_profile_fetch_error", user_id=session.user_id, message=str(e))
        return None, False

    try:
        kb_ready = has_knowledge_base(profile.org_id)
    except Exception as e:
        log_event(logger, logging.ERROR, "knowledge_base_lookup_error", org_id=profile.org_id, message=str(e))
        kb_ready = False
    return profile, kb_ready


async def resolve_session(token: Optional[str]) -> ResolvedSession:
    """
    Resolve a token into session and profile, updating the log context.

    Args:
        token: Bearer access token, or None

    Returns:
        ResolvedSession (session None when unauthenticated; profile None
        when the profile could not be loaded)
    """
    session = await asyncio.to_thread(get_session, token) if token else None
    if session is None:
        clear_log_context()
        return ResolvedSession()

    profile, kb_ready = await asyncio.to_thread(_resolve_profile, session)
    if profile is not None:
        set_log_context(user_id=profile.id, org_id=profile.org_id)
    else:
        set_log_context(user_id=session.user_id)

    return ResolvedSession(session=session, profile=profile, has_knowledge_base=kb_ready)


class SessionResolver:
    """
    Stateful resolver for a long-lived consumer (one per client connection).

    Every ``resolve`` starts a new generation; a resolution that completes
    after a newer one has started is discarded instead of overwriting it.
    """

    def __init__(self):
        self._generation = 0
        self._token: Optional[str] = None
        self.current = ResolvedSession()

    @property
    def generation(self) -> int:
        return self._generation

    async def resolve(self, token: Optional[str]) -> ResolvedSession:
        """Resolve a session change (initial load, login, logout, token refresh)."""
        self._generation += 1
        generation = self._generation
        self._token = token

        resolved = await resolve_session(token)

        if generation != self._generation:
            log_event(logger, logging.DEBUG, "auth_resolution_superseded", generation=generation)
            return self.current

        if resolved.session is None and self.current.session is not None:
            log_event(logger, logging.INFO, "auth_session_ended")
        self.current = resolved
        return resolved

    async def refresh(self) -> ResolvedSession:
        """
        Re-resolve the profile for the current session.

        Used after onboarding writes ``org_id``. A failed refresh keeps the
        previous profile.
        """
        if self.current.session is None:
            return self.current

        generation = self._generation
        refreshed = await resolve_session(self._token)
        if generation != self._generation:
            return self.current
        if refreshed.session is not None and refreshed.profile is None:
            return self.current
        self.current = refreshed
        return refreshed
