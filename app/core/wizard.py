"""SOP build wizard step model.

The wizard is a fixed linear sequence. Which step is current is derived only
from the path (``/sops/{id}/build/{step}``), so back/forward navigation and
direct links behave the same.
"""

from enum import Enum
from typing import Optional

from app.core.schemas_sops import StepperEntry


class WizardStep(str, Enum):
    CONTEXT = "context"
    VOICE = "voice"
    TRANSCRIPT = "transcript"
    DRAFT = "draft"
    COMPLIANCE = "compliance"


WIZARD_SEQUENCE: list[WizardStep] = [
    WizardStep.CONTEXT,
    WizardStep.VOICE,
    WizardStep.TRANSCRIPT,
    WizardStep.DRAFT,
    WizardStep.COMPLIANCE,
]

STEP_LABELS = {
    WizardStep.CONTEXT: "Context",
    WizardStep.VOICE: "Voice",
    WizardStep.TRANSCRIPT: "Transcript",
    WizardStep.DRAFT: "Draft",
    WizardStep.COMPLIANCE: "Compliance",
}


def step_path(sop_id: str, step: WizardStep) -> str:
    return f"/sops/{sop_id}/build/{step.value}"


def current_step(path: str) -> Optional[WizardStep]:
    """The step whose segment the path ends with, if any."""
    trimmed = (path or "").split("?", 1)[0].rstrip("/")
    for step in WIZARD_SEQUENCE:
        if trimmed.endswith("/" + step.value):
            return step
    return None


def next_step(step: WizardStep) -> Optional[WizardStep]:
    index = WIZARD_SEQUENCE.index(step)
    if index + 1 < len(WIZARD_SEQUENCE):
        return WIZARD_SEQUENCE[index + 1]
    return None


def previous_step(step: WizardStep) -> Optional[WizardStep]:
    index = WIZARD_SEQUENCE.index(step)
    return WIZARD_SEQUENCE[index - 1] if index > 0 else None


def stepper(sop_id: str, path: str) -> list[StepperEntry]:
    """
    Build the stepper for a wizard path.

    Steps before the current one are ``completed``, after it ``upcoming``.
    A path outside the wizard marks every step ``upcoming``.
    """
    current = current_step(path)
    current_index = WIZARD_SEQUENCE.index(current) if current else -1

    entries = []
    for index, step in enumerate(WIZARD_SEQUENCE):
        if index == current_index:
            state = "current"
        elif index < current_index:
            state = "completed"
        else:
            state = "upcoming"
        entries.append(
            StepperEntry(
                key=step.value,
                label=STEP_LABELS[step],
                state=state,
                path=step_path(sop_id, step),
            )
        )
    return entries
