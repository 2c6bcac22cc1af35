"""Business profile endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_knowledge_base
from app.core.schemas_orgs import BusinessProfileResponse, ProfileUpdateRequest
from app.services.onboarding import get_business_profile, update_business_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=BusinessProfileResponse)
async def get_profile(auth: AuthContext = Depends(require_knowledge_base)) -> BusinessProfileResponse:
    try:
        return get_business_profile(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "profile_fetch_error") from e


@router.put("", response_model=BusinessProfileResponse)
async def put_profile(
    request: ProfileUpdateRequest,
    auth: AuthContext = Depends(require_knowledge_base),
) -> BusinessProfileResponse:
    """Update org fields and replace the governing bodies."""
    try:
        return update_business_profile(auth.org_id, request)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "profile_update_error") from e
