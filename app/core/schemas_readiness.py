"""Pydantic schemas for manager readiness tracking."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReadinessStatus(str, Enum):
    READY = "ready"
    NEEDS_TRAINING = "needs_training"


class ReadinessItem(BaseModel):
    id: str
    org_id: str
    group_key: str
    group_label: str
    title: str
    description: Optional[str] = None
    status: Optional[ReadinessStatus] = None
    is_custom: bool = False
    sop_id: Optional[str] = None
    sort_order: Optional[int] = None


class ReadinessItemCreate(BaseModel):
    group_key: str = Field(..., min_length=1)
    group_label: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None


class ReadinessStatusUpdate(BaseModel):
    """``status=None`` clears the mark."""
    status: Optional[ReadinessStatus] = None


class ReadinessLinkSOP(BaseModel):
    sop_id: str


class ReadinessGroup(BaseModel):
    group_key: str
    group_label: str
    items: list[ReadinessItem] = Field(default_factory=list)
    ready: int = 0
    total: int = 0


class ReadinessOverview(BaseModel):
    manager_name: Optional[str] = None
    groups: list[ReadinessGroup] = Field(default_factory=list)
    seeded: bool = False
