"""SOP recommendation endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_knowledge_base
from app.core.schemas_sops import SOP, SOPRecommendation
from app.services import recommendations as recommendations_service

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("", response_model=list[SOPRecommendation])
async def list_recommendations(auth: AuthContext = Depends(require_knowledge_base)) -> list[SOPRecommendation]:
    try:
        return recommendations_service.list_recommendations(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "recommendations_fetch_error") from e


@router.post("/generate", response_model=list[SOPRecommendation], status_code=status.HTTP_201_CREATED)
async def generate_recommendations(auth: AuthContext = Depends(require_knowledge_base)) -> list[SOPRecommendation]:
    try:
        return await recommendations_service.generate_recommendations(auth.org_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "recommendations_generate_error") from e


@router.post("/{recommendation_id}/start", response_model=SOP, status_code=status.HTTP_201_CREATED)
async def start_recommendation(recommendation_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> SOP:
    """Create a draft SOP from a recommendation."""
    try:
        return recommendations_service.start_recommendation(auth.org_id, auth.user_id, recommendation_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "recommendation_start_error") from e
