"""Onboarding endpoint: create the caller's organization."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_session
from app.core.schemas_auth import SessionResponse
from app.core.schemas_orgs import OnboardingRequest
from app.services.onboarding import complete_onboarding

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post("", response_model=SessionResponse, status_code=201)
async def onboard(
    request: OnboardingRequest,
    auth: AuthContext = Depends(require_session),
) -> SessionResponse:
    """
    Create the organization, its governing bodies and link the caller to it.

    Returns the re-resolved session so the client sees the new org at once.
    """
    try:
        resolved = await complete_onboarding(auth.user_id, auth.org_id, auth.token, request)
        return SessionResponse(
            authenticated=resolved.session is not None,
            user_id=resolved.session.user_id if resolved.session else None,
            email=resolved.session.email if resolved.session else None,
            profile=resolved.profile,
            has_knowledge_base=resolved.has_knowledge_base,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "onboarding_error") from e
