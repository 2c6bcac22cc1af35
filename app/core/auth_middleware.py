"""Authentication dependencies for FastAPI.

Each request resolves its own session from the Bearer token and gets an
explicit AuthContext; nothing about the caller is held in module state.
The require_* dependencies apply the route gate server-side.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.logging import get_logger, log_event
from app.core.route_gate import decide
from app.core.schemas_auth import (
    GateAction,
    GateRequirement,
    ResolvedSession,
    UserProfile,
)
from app.core.session_resolver import resolve_session

logger = get_logger(__name__)

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


class AuthContext:
    """Context object containing the caller's resolved session."""

    def __init__(self, resolved: ResolvedSession):
        self.resolved = resolved
        self.session = resolved.session
        self.profile: Optional[UserProfile] = resolved.profile
        self.has_knowledge_base = resolved.has_knowledge_base

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    @property
    def email(self) -> Optional[str]:
        return self.session.email if self.session else None

    @property
    def token(self) -> Optional[str]:
        return self.session.access_token if self.session else None

    @property
    def org_id(self) -> Optional[str]:
        return self.profile.org_id if self.profile else None


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthContext:
    """
    Resolve the caller's session once per request.

    Returns an unauthenticated context when no valid token is present.
    """
    cached = getattr(request.state, "auth_context", None)
    if cached is not None:
        return cached

    token = credentials.credentials if credentials else None
    resolved = await resolve_session(token)
    auth = AuthContext(resolved)
    request.state.auth_context = auth
    return auth


def _enforce(auth: AuthContext, requirement: GateRequirement) -> AuthContext:
    decision = decide(requirement, auth.resolved)

    if decision.action == GateAction.RENDER:
        # Org-scoped APIs need a loaded profile even where navigation tolerates its absence
        if requirement in (GateRequirement.ORG, GateRequirement.KNOWLEDGE_BASE) and not auth.org_id:
            log_event(logger, logging.WARNING, "auth_guard_profile_unavailable", user_id=auth.user_id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": "Profile unavailable", "redirect_to": None},
            )
        return auth

    log_event(
        logger,
        logging.INFO,
        "auth_guard_redirect",
        requirement=requirement.value,
        to=decision.redirect_to,
    )
    if requirement != GateRequirement.ANONYMOUS and auth.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not authenticated", "redirect_to": decision.redirect_to},
            headers={"WWW-Authenticate": "Bearer"},
        )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"message": "Route not available", "redirect_to": decision.redirect_to},
    )


async def require_anonymous(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Only callers without a session (login, signup, password reset)."""
    return _enforce(auth, GateRequirement.ANONYMOUS)


async def require_session(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Any authenticated caller, with or without an organization."""
    return _enforce(auth, GateRequirement.SESSION)


async def require_org(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Authenticated caller whose profile belongs to an organization."""
    return _enforce(auth, GateRequirement.ORG)


async def require_knowledge_base(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Authenticated caller whose organization has built its knowledge base."""
    return _enforce(auth, GateRequirement.KNOWLEDGE_BASE)
