"""Pydantic schemas for the knowledge checklist, knowledge base and interview."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class KnowledgeItemType(str, Enum):
    LINK = "LINK"
    PDF = "PDF"
    DOCUMENT = "DOCUMENT"
    VOICE = "VOICE"
    OTHER = "OTHER"


class KnowledgePriority(str, Enum):
    REQUIRED = "REQUIRED"
    RECOMMENDED = "RECOMMENDED"
    OPTIONAL = "OPTIONAL"


class KnowledgeLevel(str, Enum):
    FEDERAL = "federal"
    STATE = "state"
    COUNTY = "county"
    LOCAL = "local"
    INTERNAL = "internal"


class KnowledgeItemStatus(str, Enum):
    PENDING = "pending"
    PROVIDED = "provided"
    LEARNED = "learned"
    SKIPPED = "skipped"


class InterviewStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


KNOWLEDGE_BASE_COMPLETE = "complete"


class BusinessProfile(BaseModel):
    """Profile extracted by the knowledge interview."""
    industry_subtype: Optional[str] = None
    services: list[str] = Field(default_factory=list)
    client_types: list[str] = Field(default_factory=list)
    staff_count_range: str = ""
    licensing_bodies: list[str] = Field(default_factory=list)
    certifications_held: list[str] = Field(default_factory=list)
    years_in_operation: Optional[int] = None
    special_considerations: list[str] = Field(default_factory=list)
    has_existing_sops: bool = False
    pain_points: list[str] = Field(default_factory=list)


# ============================================================================
# Checklist
# ============================================================================


class KnowledgeItem(BaseModel):
    id: str
    org_id: str
    title: str
    description: str = ""
    type: KnowledgeItemType = KnowledgeItemType.DOCUMENT
    priority: KnowledgePriority = KnowledgePriority.RECOMMENDED
    level: KnowledgeLevel = KnowledgeLevel.INTERNAL
    category: Optional[str] = None
    suggested_source: Optional[str] = None
    status: KnowledgeItemStatus = KnowledgeItemStatus.PENDING
    provided_url: Optional[str] = None
    provided_file: Optional[str] = None
    provided_text: Optional[str] = None
    provided_transcript: Optional[str] = None
    sort_order: Optional[int] = None


class KnowledgeItemCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    type: KnowledgeItemType = KnowledgeItemType.DOCUMENT
    priority: KnowledgePriority = KnowledgePriority.RECOMMENDED
    level: KnowledgeLevel = KnowledgeLevel.INTERNAL


class KnowledgeSourceCreate(BaseModel):
    """A source added with its content already in hand."""
    title: str = Field(..., min_length=1)
    description: str = ""
    type: KnowledgeItemType
    level: KnowledgeLevel = KnowledgeLevel.INTERNAL
    content: str  # URL, file name, document text or transcript depending on type


class ProvideUrl(BaseModel):
    url: str


class ProvideFile(BaseModel):
    filename: str


class ProvideText(BaseModel):
    text: str


class ProvideTranscript(BaseModel):
    transcript: str


class ChecklistGroups(BaseModel):
    """Items grouped by priority for display; grouping never gates anything."""
    REQUIRED: list[KnowledgeItem] = Field(default_factory=list)
    RECOMMENDED: list[KnowledgeItem] = Field(default_factory=list)
    OPTIONAL: list[KnowledgeItem] = Field(default_factory=list)
    handled: int = 0
    total: int = 0


class BuildGate(BaseModel):
    can_build: bool
    pending_required: list[str] = Field(default_factory=list)
    source_count: int = 0


# ============================================================================
# Knowledge base
# ============================================================================


class KnowledgeBase(BaseModel):
    id: str
    org_id: str
    summary: str = ""
    learned_topics: list[str] = Field(default_factory=list)
    source_count: int = 0
    status: str = KNOWLEDGE_BASE_COMPLETE
    built_at: Optional[datetime] = None


# ============================================================================
# Interview
# ============================================================================


class ChatMessage(BaseModel):
    role: str  # assistant | user
    content: str


class InterviewMessage(BaseModel):
    content: str = Field(..., min_length=1)


class KnowledgeInterview(BaseModel):
    id: str
    org_id: str
    status: InterviewStatus = InterviewStatus.IN_PROGRESS
    messages: list[ChatMessage] = Field(default_factory=list)
    answers: Optional[BusinessProfile] = None

    @field_validator("messages", mode="before")
    @classmethod
    def _null_messages(cls, v):
        return v or []


class InterviewProgress(BaseModel):
    current: int
    total: int


class InterviewView(BaseModel):
    interview: KnowledgeInterview
    progress: Optional[InterviewProgress] = None
    last_question: Optional[str] = None
