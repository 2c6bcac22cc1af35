"""Manager readiness endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_knowledge_base
from app.core.schemas_readiness import (
    ReadinessItem,
    ReadinessItemCreate,
    ReadinessLinkSOP,
    ReadinessOverview,
    ReadinessStatusUpdate,
)
from app.services import readiness as readiness_service

router = APIRouter(prefix="/readiness", tags=["readiness"])


@router.get("", response_model=ReadinessOverview)
async def get_readiness(auth: AuthContext = Depends(require_knowledge_base)) -> ReadinessOverview:
    """Readiness checklist; the default template is seeded on first visit."""
    try:
        return readiness_service.get_overview(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "readiness_fetch_error") from e


@router.post("", response_model=ReadinessItem, status_code=status.HTTP_201_CREATED)
async def add_item(
    data: ReadinessItemCreate, auth: AuthContext = Depends(require_knowledge_base)
) -> ReadinessItem:
    try:
        return readiness_service.add_custom_item(auth.org_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "readiness_item_add_error") from e


@router.patch("/{item_id}", response_model=ReadinessItem)
async def set_status(
    item_id: str, body: ReadinessStatusUpdate, auth: AuthContext = Depends(require_knowledge_base)
) -> ReadinessItem:
    try:
        return readiness_service.set_status(auth.org_id, item_id, body.status)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "readiness_status_update_error") from e


@router.post("/{item_id}/link-sop", response_model=ReadinessItem)
async def link_sop(
    item_id: str, body: ReadinessLinkSOP, auth: AuthContext = Depends(require_knowledge_base)
) -> ReadinessItem:
    try:
        return readiness_service.link_sop(auth.org_id, item_id, body.sop_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "readiness_link_sop_error") from e


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> None:
    try:
        readiness_service.delete_item(auth.org_id, item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "readiness_item_delete_error") from e
