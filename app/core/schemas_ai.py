"""Pydantic schemas for the AI proxy envelope and per-action data shapes."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.core.schemas_knowledge import (
    BusinessProfile,
    KnowledgeItemType,
    KnowledgeLevel,
    KnowledgePriority,
)
from app.core.schemas_sops import Severity


class AIAction(str, Enum):
    RECOMMEND_SOPS = "recommend-sops"
    GENERATE_SOP_STEPS = "generate-sop-steps"
    COMPLIANCE_CHECK = "compliance-check"
    KNOWLEDGE_INTERVIEW = "knowledge-interview"
    GENERATE_KNOWLEDGE_CHECKLIST = "generate-knowledge-checklist"
    INGEST_KNOWLEDGE = "ingest-knowledge"
    TEST = "test"


PARSE_FAILURE_MESSAGE = "Failed to parse AI response as JSON"


class AIProxyRequest(BaseModel):
    action: Optional[str] = None
    payload: Optional[dict[str, Any]] = None


class AIProxyResponse(BaseModel):
    success: bool
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None


# ============================================================================
# Action data shapes
# ============================================================================


class RecommendedSOP(BaseModel):
    title: str
    category: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None


class RecommendationsData(BaseModel):
    recommendations: list[RecommendedSOP]


class GeneratedStep(BaseModel):
    step_number: int
    title: str
    description: Optional[str] = None


class StepsData(BaseModel):
    steps: list[GeneratedStep]


class RawFinding(BaseModel):
    finding_id: int
    severity: Severity
    title: str
    description: str = ""
    related_step: Optional[int] = None
    recommendation: str = ""


class FindingsData(BaseModel):
    findings: list[RawFinding]


class InterviewReply(BaseModel):
    message: str
    question_number: int = 0
    total_expected: int = 0
    done: bool = False
    profile: Optional[BusinessProfile] = None


class ChecklistItemDraft(BaseModel):
    title: str
    description: str = ""
    type: KnowledgeItemType = KnowledgeItemType.DOCUMENT
    priority: KnowledgePriority = KnowledgePriority.RECOMMENDED
    level: KnowledgeLevel = KnowledgeLevel.INTERNAL
    category: Optional[str] = None
    suggested_source: Optional[str] = None


class ChecklistData(BaseModel):
    items: list[ChecklistItemDraft]


class IngestData(BaseModel):
    summary: str
    learned_topics: list[str] = Field(default_factory=list)
