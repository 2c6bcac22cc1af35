"""Session endpoints: who am I, explicit refresh, and route gate decisions."""

from fastapi import APIRouter, Depends, Query

from app.core.auth_middleware import AuthContext, get_auth_context, require_session
from app.core.route_gate import decide_for_path
from app.core.schemas_auth import GateDecision, SessionResponse
from app.core.session_resolver import resolve_session

router = APIRouter(prefix="/session", tags=["session"])


def _session_response(auth: AuthContext) -> SessionResponse:
    return SessionResponse(
        authenticated=auth.is_authenticated,
        user_id=auth.user_id,
        email=auth.email,
        profile=auth.profile,
        has_knowledge_base=auth.has_knowledge_base,
    )


@router.get("", response_model=SessionResponse)
async def get_session(auth: AuthContext = Depends(get_auth_context)) -> SessionResponse:
    """Resolve the caller's session and profile."""
    return _session_response(auth)


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(auth: AuthContext = Depends(require_session)) -> SessionResponse:
    """
    Re-resolve the caller's profile.

    Called after onboarding so the new organization is visible immediately.
    """
    resolved = await resolve_session(auth.token)
    return _session_response(AuthContext(resolved))


@router.get("/gate", response_model=GateDecision)
async def gate(
    path: str = Query(..., description="Client route being navigated to"),
    auth: AuthContext = Depends(get_auth_context),
) -> GateDecision:
    """Render, loading or redirect decision for a client route."""
    return decide_for_path(path, auth.resolved)
