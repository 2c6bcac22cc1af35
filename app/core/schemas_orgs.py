"""Pydantic schemas for organizations, governing bodies and onboarding."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

OTHER_INDUSTRY = "Other"


class GoverningBodyLevel(str, Enum):
    FEDERAL = "federal"
    STATE = "state"
    COUNTY = "county"
    LOCAL = "local"


class GoverningBodyInput(BaseModel):
    name: str = Field(..., min_length=1)
    level: GoverningBodyLevel
    url: Optional[str] = None


class GoverningBody(BaseModel):
    id: str
    org_id: str
    name: str
    level: str
    url: Optional[str] = None
    created_at: Optional[datetime] = None


class Organization(BaseModel):
    id: str
    name: str
    industry_type: Optional[str] = None
    industry_custom_label: Optional[str] = None
    state: Optional[str] = None
    county: Optional[str] = None
    city: Optional[str] = None
    manager_name: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def industry_label(self) -> str:
        if self.industry_type == OTHER_INDUSTRY:
            return self.industry_custom_label or OTHER_INDUSTRY
        return self.industry_type or ""


class BusinessProfileForm(BaseModel):
    """Fields shared by the onboarding wizard and the profile edit form."""
    name: str = ""
    industry_type: str = ""
    industry_custom_label: Optional[str] = None
    state: str = ""
    county: str = ""
    city: str = ""
    governing_bodies: list[GoverningBodyInput] = Field(default_factory=list)


class OnboardingRequest(BusinessProfileForm):
    none_apply: bool = Field(
        default=False,
        description="Confirms that no governing bodies apply when the list is empty",
    )


class ProfileUpdateRequest(BusinessProfileForm):
    pass


class BusinessProfileResponse(BaseModel):
    org: Organization
    governing_bodies: list[GoverningBody] = Field(default_factory=list)
