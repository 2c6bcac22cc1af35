"""SOP library endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_knowledge_base
from app.core.schemas_sops import SOP, SOPCreate, SOPDetail, SOPUpdate
from app.services import sops as sops_service

router = APIRouter(prefix="/sops", tags=["sops"])


@router.get("", response_model=list[SOP])
async def list_sops(auth: AuthContext = Depends(require_knowledge_base)) -> list[SOP]:
    try:
        return sops_service.list_sops(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_library_fetch_error") from e


@router.post("", response_model=SOP, status_code=status.HTTP_201_CREATED)
async def create_sop(data: SOPCreate, auth: AuthContext = Depends(require_knowledge_base)) -> SOP:
    """Create a custom draft SOP."""
    try:
        return sops_service.create_custom_sop(auth.org_id, auth.user_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_create_error") from e


@router.get("/{sop_id}", response_model=SOPDetail)
async def get_sop(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> SOPDetail:
    try:
        return sops_service.get_sop_detail(auth.org_id, sop_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_detail_fetch_error") from e


@router.patch("/{sop_id}", response_model=SOPDetail)
async def update_sop(sop_id: str, data: SOPUpdate, auth: AuthContext = Depends(require_knowledge_base)) -> SOPDetail:
    try:
        return sops_service.update_sop(auth.org_id, sop_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_detail_update_error") from e


@router.delete("/{sop_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sop(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> None:
    try:
        sops_service.delete_sop(auth.org_id, sop_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_delete_error") from e
