"""Pydantic schemas for SOPs, SOP steps, wizard drafts and recommendations."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class SOPStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    # Declared by the data model; no code path produces it.
    ARCHIVED = "archived"


class RecommendationStatus(str, Enum):
    SUGGESTED = "suggested"
    STARTED = "started"
    # Declared by the data model; no code path produces it.
    COMPLETED = "completed"


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FindingStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    SKIPPED = "skipped"


# ============================================================================
# SOPs
# ============================================================================


class SOP(BaseModel):
    id: str
    org_id: str
    title: str
    category: Optional[str] = None
    purpose: Optional[str] = None
    frequency: Optional[str] = None
    status: SOPStatus = SOPStatus.DRAFT
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SOPCreate(BaseModel):
    title: str = Field(..., min_length=1)
    category: Optional[str] = None
    purpose: Optional[str] = None
    frequency: Optional[str] = None


class SOPUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    purpose: Optional[str] = None
    frequency: Optional[str] = None


class SOPStep(BaseModel):
    id: str
    sop_id: str
    step_number: int
    title: str
    description: Optional[str] = None


class SOPDetail(SOP):
    steps: list[SOPStep] = Field(default_factory=list)


class StepCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None


class StepUpdate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None


class StepMove(BaseModel):
    direction: MoveDirection


# ============================================================================
# Wizard drafts
# ============================================================================


class ContextLink(BaseModel):
    url: str = ""
    label: str = ""


class WizardContext(BaseModel):
    """Stored under ``sop-context-{sopId}``."""
    links: list[ContextLink] = Field(default_factory=list)
    regulationText: str = ""


class WizardTranscript(BaseModel):
    """Stored raw under ``sop-voice-{sopId}``."""
    transcript: str = ""


class StepperEntry(BaseModel):
    key: str
    label: str
    state: str  # current | completed | upcoming
    path: str


class DraftStepState(BaseModel):
    steps: list[SOPStep] = Field(default_factory=list)
    generated: bool = False


# ============================================================================
# Compliance
# ============================================================================


class ComplianceFinding(BaseModel):
    finding_id: int
    severity: Severity
    title: str
    description: str = ""
    related_step: Optional[int] = None
    recommendation: str = ""
    status: FindingStatus = FindingStatus.PENDING


class FindingSummary(BaseModel):
    high: int = 0
    medium: int = 0
    low: int = 0
    resolved: int = 0
    skipped: int = 0
    total: int = 0


class ComplianceStepState(BaseModel):
    findings: list[ComplianceFinding] = Field(default_factory=list)
    summary: FindingSummary = Field(default_factory=FindingSummary)


# ============================================================================
# Recommendations
# ============================================================================


class SOPRecommendation(BaseModel):
    id: str
    org_id: str
    title: str
    category: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    status: RecommendationStatus = RecommendationStatus.SUGGESTED
    sop_id: Optional[str] = None
