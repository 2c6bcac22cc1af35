"""SOP build wizard endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.errors import to_http_exception
from app.core.auth_middleware import AuthContext, require_knowledge_base
from app.core.schemas_sops import (
    ComplianceStepState,
    DraftStepState,
    SOPDetail,
    SOPStep,
    StepCreate,
    StepMove,
    StepperEntry,
    StepUpdate,
    WizardContext,
    WizardTranscript,
)
from app.services import sop_wizard

router = APIRouter(prefix="/sops/{sop_id}/wizard", tags=["sop_wizard"])


# ============================================================================
# Context / transcript
# ============================================================================


@router.get("/context", response_model=WizardContext)
async def get_context(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> WizardContext:
    try:
        return sop_wizard.get_context(auth.org_id, sop_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "context_fetch_error") from e


@router.put("/context", response_model=WizardContext)
async def put_context(
    sop_id: str, context: WizardContext, auth: AuthContext = Depends(require_knowledge_base)
) -> WizardContext:
    try:
        return sop_wizard.save_context(auth.org_id, sop_id, context)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "context_save_error") from e


@router.get("/transcript", response_model=WizardTranscript)
async def get_transcript(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> WizardTranscript:
    try:
        return WizardTranscript(transcript=sop_wizard.get_transcript(auth.org_id, sop_id))
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "transcript_fetch_error") from e


@router.put("/transcript", response_model=WizardTranscript)
async def put_transcript(
    sop_id: str, body: WizardTranscript, auth: AuthContext = Depends(require_knowledge_base)
) -> WizardTranscript:
    try:
        return WizardTranscript(transcript=sop_wizard.save_transcript(auth.org_id, sop_id, body.transcript))
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "transcript_save_error") from e


@router.get("/stepper", response_model=list[StepperEntry])
async def get_stepper(
    sop_id: str,
    path: str = Query(..., description="Current wizard path"),
    auth: AuthContext = Depends(require_knowledge_base),
) -> list[StepperEntry]:
    try:
        return sop_wizard.get_stepper(auth.org_id, sop_id, path)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "stepper_error") from e


# ============================================================================
# Draft
# ============================================================================


@router.post("/draft/enter", response_model=DraftStepState)
async def enter_draft(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> DraftStepState:
    """Enter the draft step; generates steps when the SOP has none."""
    try:
        return await sop_wizard.enter_draft(auth.org_id, sop_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_generate_error") from e


@router.post("/draft/generate", response_model=DraftStepState)
async def generate_draft(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> DraftStepState:
    """Retry draft generation."""
    try:
        return await sop_wizard.generate_draft(auth.org_id, sop_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_generate_error") from e


@router.post("/steps", response_model=list[SOPStep], status_code=201)
async def add_step(sop_id: str, data: StepCreate, auth: AuthContext = Depends(require_knowledge_base)) -> list[SOPStep]:
    try:
        return sop_wizard.add_step(auth.org_id, sop_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_step_add_error") from e


@router.put("/steps/{step_id}", response_model=list[SOPStep])
async def edit_step(
    sop_id: str, step_id: str, data: StepUpdate, auth: AuthContext = Depends(require_knowledge_base)
) -> list[SOPStep]:
    try:
        return sop_wizard.edit_step(auth.org_id, sop_id, step_id, data)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_step_edit_error") from e


@router.delete("/steps/{step_id}", response_model=list[SOPStep])
async def delete_step(sop_id: str, step_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> list[SOPStep]:
    try:
        return sop_wizard.delete_step(auth.org_id, sop_id, step_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_step_delete_error") from e


@router.post("/steps/{step_id}/move", response_model=list[SOPStep])
async def move_step(
    sop_id: str, step_id: str, body: StepMove, auth: AuthContext = Depends(require_knowledge_base)
) -> list[SOPStep]:
    """Swap a step with its neighbour."""
    try:
        return sop_wizard.move_step(auth.org_id, sop_id, step_id, body.direction)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "draft_step_reorder_error") from e


# ============================================================================
# Compliance
# ============================================================================


@router.post("/compliance/enter", response_model=ComplianceStepState)
async def enter_compliance(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> ComplianceStepState:
    try:
        return await sop_wizard.enter_compliance(auth.org_id, sop_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "compliance_check_error") from e


@router.post("/compliance/check", response_model=ComplianceStepState)
async def check_compliance(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> ComplianceStepState:
    """Retry the compliance check."""
    try:
        return await sop_wizard.check_compliance(auth.org_id, sop_id, token=auth.token)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "compliance_check_error") from e


@router.post("/compliance/finalize", response_model=SOPDetail)
async def finalize(sop_id: str, auth: AuthContext = Depends(require_knowledge_base)) -> SOPDetail:
    """Publish the SOP."""
    try:
        return sop_wizard.finalize_sop(auth.org_id, sop_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e, "sop_finalize_error") from e
