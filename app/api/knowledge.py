"""Knowledge checklist, knowledge base and interview endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_org
from app.core.schemas_knowledge import (
    BuildGate,
    ChecklistGroups,
    InterviewMessage,
    InterviewView,
    KnowledgeBase,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeSourceCreate,
    ProvideFile,
    ProvideText,
    ProvideTranscript,
    ProvideUrl,
)
from app.services import knowledge_checklist, knowledge_interview

router = APIRouter(prefix="/knowledge", tags=["knowledge"])


# ============================================================================
# Checklist
# ============================================================================


@router.post("/checklist/generate", response_model=ChecklistGroups)
async def generate_checklist(auth: AuthContext = Depends(require_org)) -> ChecklistGroups:
    try:
        return await knowledge_checklist.generate_checklist(auth.org_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_checklist_generate_error") from e


@router.get("/items", response_model=ChecklistGroups)
async def list_items(auth: AuthContext = Depends(require_org)) -> ChecklistGroups:
    try:
        return knowledge_checklist.list_checklist(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_items_fetch_error") from e


@router.post("/items", response_model=KnowledgeItem, status_code=status.HTTP_201_CREATED)
async def add_item(data: KnowledgeItemCreate, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.add_item(auth.org_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_add_error") from e


@router.post("/sources", response_model=KnowledgeItem, status_code=status.HTTP_201_CREATED)
async def add_source(data: KnowledgeSourceCreate, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.add_source(auth.org_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_source_add_error") from e


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, auth: AuthContext = Depends(require_org)) -> None:
    try:
        knowledge_checklist.delete_item(auth.org_id, item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_delete_error") from e



@router.post("/items/{item_id}/use-suggested", response_model=KnowledgeItem)
async def use_suggested(item_id: str, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.use_suggested_source(auth.org_id, item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/url", response_model=KnowledgeItem)
async def save_url(item_id: str, body: ProvideUrl, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.provide_url(auth.org_id, item_id, body.url)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/file", response_model=KnowledgeItem)
async def save_file(item_id: str, body: ProvideFile, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.provide_file(auth.org_id, item_id, body.filename)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/text", response_model=KnowledgeItem)
async def save_text(item_id: str, body: ProvideText, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.provide_text(auth.org_id, item_id, body.text)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/transcript", response_model=KnowledgeItem)
async def save_transcript(
    item_id: str, body: ProvideTranscript, auth: AuthContext = Depends(require_org)
) -> KnowledgeItem:
    try:
        return knowledge_checklist.provide_transcript(auth.org_id, item_id, body.transcript)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/skip", response_model=KnowledgeItem)
async def skip_item(item_id: str, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.skip_item(auth.org_id, item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


@router.post("/items/{item_id}/reopen", response_model=KnowledgeItem)
async def reopen_item(item_id: str, auth: AuthContext = Depends(require_org)) -> KnowledgeItem:
    try:
        return knowledge_checklist.reopen_item(auth.org_id, item_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_item_update_error") from e


# ============================================================================
# Knowledge base
# ============================================================================


@router.get("/base", response_model=Optional[KnowledgeBase])
async def get_base(auth: AuthContext = Depends(require_org)) -> Optional[KnowledgeBase]:
    try:
        return knowledge_checklist.get_knowledge_base(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_base_fetch_error") from e


@router.get("/base/gate", response_model=BuildGate)
async def get_gate(auth: AuthContext = Depends(require_org)) -> BuildGate:
    try:
        return knowledge_checklist.get_build_gate(auth.org_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_base_gate_error") from e


@router.post("/base/build", response_model=KnowledgeBase)
async def build_base(auth: AuthContext = Depends(require_org)) -> KnowledgeBase:
    """Build (or rebuild) the org's knowledge base."""
    try:
        return await knowledge_checklist.build_knowledge_base(auth.org_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_base_build_error") from e


# ============================================================================
# Interview
# ============================================================================


@router.get("/interview", response_model=InterviewView)
async def get_interview(auth: AuthContext = Depends(require_org)) -> InterviewView:
    try:
        return await knowledge_interview.load_interview(auth.org_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_load_error") from e


@router.post("/interview/messages", response_model=InterviewView)
async def send_message(body: InterviewMessage, auth: AuthContext = Depends(require_org)) -> InterviewView:
    try:
        return await knowledge_interview.send_message(auth.org_id, body.content, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_ai_error") from e


@router.post("/interview/restart", response_model=InterviewView)
async def restart(auth: AuthContext = Depends(require_org)) -> InterviewView:
    try:
        return await knowledge_interview.restart_interview(auth.org_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "knowledge_interview_restart_error") from e
