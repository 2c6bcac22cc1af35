"""SOP build wizard workflow.

Context and transcript input is kept in the keyed draft store until the
draft step turns it into SOP steps. Draft generation and the compliance
check run automatically on step entry; duplicate concurrent entries share a
single in-flight call. Failures are not retried; the caller re-runs the
whole step.
"""

import json
import logging
from typing import Optional

from app.core.ai_client import invoke_action
from app.core.errors import AIProxyError, NotFoundError, WizardInputError
from app.core.findings import FindingSet
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import AIAction, FindingsData, StepsData
from app.core.schemas_sops import (
    ComplianceStepState,
    DraftStepState,
    MoveDirection,
    SOPDetail,
    SOPStatus,
    SOPStep,
    StepCreate,
    StepperEntry,
    StepUpdate,
    WizardContext,
)
from app.core.single_flight import generation_flights
from app.core.wizard import WizardStep, stepper
from app.db import sop_steps
from app.db.governing_bodies import list_governing_bodies
from app.db.knowledge_base import get_knowledge_summary
from app.db.orgs import get_org
from app.db.sops import update_sop
from app.db.wizard_drafts import context_key, get_draft, put_draft, voice_key
from app.services.sops import get_sop_detail, require_sop

logger = get_logger(__name__)

NO_DRAFT_INPUT_MESSAGE = (
    "No process description or context found. Go back to Capture and describe your process."
)
NO_STEPS_MESSAGE = "No SOP steps found. Go back to Draft and add steps first."


def _steps(sop_id: str) -> list[SOPStep]:
    return [SOPStep(**row) for row in sop_steps.list_steps(sop_id)]


# ============================================================================
# Context / transcript drafts
# ============================================================================


def _load_context(org_id: str, sop_id: str) -> WizardContext:
    raw = get_draft(org_id, context_key(sop_id))
    if not raw:
        return WizardContext()
    try:
        return WizardContext.model_validate(json.loads(raw))
    except ValueError:
        log_event(logger, logging.WARNING, "wizard_context_unreadable", sop_id=sop_id)
        return WizardContext()


def get_context(org_id: str, sop_id: str) -> WizardContext:
    require_sop(org_id, sop_id)
    return _load_context(org_id, sop_id)


def save_context(org_id: str, sop_id: str, context: WizardContext) -> WizardContext:
    """Overwrite the stored context (last write wins)."""
    require_sop(org_id, sop_id)
    put_draft(org_id, context_key(sop_id), context.model_dump_json())
    log_event(
        logger,
        logging.INFO,
        "context_saved",
        sop_id=sop_id,
        link_count=len(context.links),
        has_regulation_text=bool(context.regulationText),
    )
    return context


def get_transcript(org_id: str, sop_id: str) -> str:
    require_sop(org_id, sop_id)
    return get_draft(org_id, voice_key(sop_id)) or ""


def save_transcript(org_id: str, sop_id: str, transcript: str) -> str:
    require_sop(org_id, sop_id)
    put_draft(org_id, voice_key(sop_id), transcript)
    log_event(logger, logging.INFO, "transcript_saved", sop_id=sop_id, length=len(transcript))
    return transcript


def get_stepper(org_id: str, sop_id: str, path: str) -> list[StepperEntry]:
    require_sop(org_id, sop_id)
    return stepper(sop_id, path)


# ============================================================================
# Draft step
# ============================================================================


async def _generate_steps(org_id: str, sop: dict, token: Optional[str]) -> DraftStepState:
    sop_id = sop["id"]
    transcript = get_draft(org_id, voice_key(sop_id)) or ""
    context = _load_context(org_id, sop_id)
    links = [link.model_dump() for link in context.links if link.url.strip()]

    if not transcript and not context.links and not context.regulationText:
        raise WizardInputError(NO_DRAFT_INPUT_MESSAGE)

    log_event(logger, logging.INFO, "draft_generate_start", sop_id=sop_id)
    payload = {
        "transcript": transcript or "No transcript provided.",
        "context_links": links,
        "regulation_text": context.regulationText,
        "sop_title": sop.get("title") or "",
    }
    knowledge_context = get_knowledge_summary(org_id)
    if knowledge_context:
        payload["knowledge_context"] = knowledge_context

    try:
        data = await invoke_action(AIAction.GENERATE_SOP_STEPS, payload, StepsData, token=token)
    except AIProxyError as e:
        log_event(logger, logging.ERROR, "draft_generate_error", sop_id=sop_id, message=e.message)
        raise

    sop_steps.insert_steps(sop_id, [step.model_dump() for step in data.steps])
    log_event(logger, logging.INFO, "draft_generate_success", sop_id=sop_id, step_count=len(data.steps))
    return DraftStepState(steps=_steps(sop_id), generated=True)


async def _generate_if_empty(org_id: str, sop: dict, token: Optional[str]) -> DraftStepState:
    existing = _steps(sop["id"])
    if existing:
        return DraftStepState(steps=existing)
    return await _generate_steps(org_id, sop, token)


async def enter_draft(org_id: str, sop_id: str, token: Optional[str] = None) -> DraftStepState:
    """
    Enter the draft step; generates steps once when the SOP has none.

    Raises:
        NotFoundError: SOP not visible to the org
        WizardInputError: No transcript, links or regulation text stored
        AIProxyError: Generation failed
    """
    sop = require_sop(org_id, sop_id)
    existing = _steps(sop_id)
    if existing:
        return DraftStepState(steps=existing)
    return await generation_flights.run(
        (WizardStep.DRAFT.value, sop_id), lambda: _generate_if_empty(org_id, sop, token)
    )


async def generate_draft(org_id: str, sop_id: str, token: Optional[str] = None) -> DraftStepState:
    """Explicit retry of draft generation; still a no-op once steps exist."""
    sop = require_sop(org_id, sop_id)
    log_event(logger, logging.INFO, "draft_generate_retry", sop_id=sop_id)
    return await generation_flights.run(
        (WizardStep.DRAFT.value, sop_id), lambda: _generate_if_empty(org_id, sop, token)
    )


def add_step(org_id: str, sop_id: str, data: StepCreate) -> list[SOPStep]:
    """Append a step after the current highest step number."""
    require_sop(org_id, sop_id)
    existing = _steps(sop_id)
    step_number = max(s.step_number for s in existing) + 1 if existing else 1
    sop_steps.insert_steps(
        sop_id,
        [
            {
                "step_number": step_number,
                "title": data.title.strip(),
                "description": (data.description or "").strip() or None,
            }
        ],
    )
    log_event(logger, logging.INFO, "draft_step_add", sop_id=sop_id, step_number=step_number)
    return _steps(sop_id)


def edit_step(org_id: str, sop_id: str, step_id: str, data: StepUpdate) -> list[SOPStep]:
    require_sop(org_id, sop_id)
    updated = sop_steps.update_step(
        sop_id,
        step_id,
        {"title": data.title.strip(), "description": (data.description or "").strip() or None},
    )
    if not updated:
        raise NotFoundError(f"Step {step_id} not found")
    log_event(logger, logging.INFO, "draft_step_edit", step_id=step_id)
    return _steps(sop_id)


def delete_step(org_id: str, sop_id: str, step_id: str) -> list[SOPStep]:
    require_sop(org_id, sop_id)
    if not sop_steps.soft_delete_step(sop_id, step_id):
        raise NotFoundError(f"Step {step_id} not found")
    log_event(logger, logging.INFO, "draft_step_delete", step_id=step_id)
    return _steps(sop_id)


def move_step(org_id: str, sop_id: str, step_id: str, direction: MoveDirection) -> list[SOPStep]:
    """
    Move a step one position by swapping step numbers with its neighbour.

    Moving the first step up or the last step down changes nothing.
    Step numbers are never renumbered, so gaps are kept as they are.
    """
    require_sop(org_id, sop_id)
    steps = _steps(sop_id)
    index = next((i for i, s in enumerate(steps) if s.id == step_id), None)
    if index is None:
        raise NotFoundError(f"Step {step_id} not found")

    swap_index = index - 1 if direction == MoveDirection.UP else index + 1
    if swap_index < 0 or swap_index >= len(steps):
        return steps

    step_a, step_b = steps[index], steps[swap_index]
    sop_steps.update_step(sop_id, step_a.id, {"step_number": step_b.step_number})
    sop_steps.update_step(sop_id, step_b.id, {"step_number": step_a.step_number})

    log_event(
        logger,
        logging.INFO,
        "draft_step_reorder",
        step_a_id=step_a.id,
        step_b_id=step_b.id,
        direction=direction.value,
    )
    return _steps(sop_id)


# ============================================================================
# Compliance step
# ============================================================================


async def _run_compliance_check(org_id: str, sop: dict, token: Optional[str]) -> ComplianceStepState:
    sop_id = sop["id"]
    log_event(logger, logging.INFO, "compliance_check_start", sop_id=sop_id)

    steps = _steps(sop_id)
    if not steps:
        raise WizardInputError(NO_STEPS_MESSAGE)

    org = get_org(org_id) or {}
    governing_bodies = [
        {"name": gb["name"], "level": gb["level"]} for gb in list_governing_bodies(org_id)
    ]
    payload = {
        "sop_title": sop.get("title") or "",
        "steps": [
            {"step_number": s.step_number, "title": s.title, "description": s.description}
            for s in steps
        ],
        "industry_type": org.get("industry_type") or "",
        "state": org.get("state") or "",
        "governing_bodies": governing_bodies,
    }
    knowledge_context = get_knowledge_summary(org_id)
    if knowledge_context:
        payload["knowledge_context"] = knowledge_context

    try:
        data = await invoke_action(AIAction.COMPLIANCE_CHECK, payload, FindingsData, token=token)
    except AIProxyError as e:
        log_event(logger, logging.ERROR, "compliance_check_error", sop_id=sop_id, message=e.message)
        raise

    findings = FindingSet.from_raw(data.findings)
    log_event(logger, logging.INFO, "compliance_check_success", sop_id=sop_id, finding_count=len(data.findings))
    return ComplianceStepState(findings=findings.findings, summary=findings.summary())


async def enter_compliance(org_id: str, sop_id: str, token: Optional[str] = None) -> ComplianceStepState:
    """
    Enter the compliance step and audit the current steps.

    Findings come back pending and are not stored; every entry after the
    previous one finished runs a fresh check.
    """
    sop = require_sop(org_id, sop_id)
    return await generation_flights.run(
        (WizardStep.COMPLIANCE.value, sop_id), lambda: _run_compliance_check(org_id, sop, token)
    )


async def check_compliance(org_id: str, sop_id: str, token: Optional[str] = None) -> ComplianceStepState:
    """Explicit retry of the compliance check."""
    log_event(logger, logging.INFO, "compliance_check_retry", sop_id=sop_id)
    return await enter_compliance(org_id, sop_id, token)


def finalize_sop(org_id: str, sop_id: str) -> SOPDetail:
    """Publish the SOP and return its refreshed detail."""
    require_sop(org_id, sop_id)
    log_event(logger, logging.INFO, "sop_finalize", sop_id=sop_id)
    if not update_sop(org_id, sop_id, {"status": SOPStatus.PUBLISHED.value}):
        raise NotFoundError(f"SOP {sop_id} not found")
    return get_sop_detail(org_id, sop_id)
