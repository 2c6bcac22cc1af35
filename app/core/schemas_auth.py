"""Pydantic schemas for sessions, user profiles and auth pass-through."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """Role written on a freshly created profile row."""
    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"


DEFAULT_ROLE = UserRole.OWNER


# ============================================================================
# Session & Profile
# ============================================================================


class UserProfile(BaseModel):
    """Row of the users table; id mirrors the auth identity."""
    id: str
    email: str
    role: str = DEFAULT_ROLE.value
    org_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Session(BaseModel):
    """An authenticated session issued by the auth provider."""
    user_id: str
    email: str = ""
    access_token: str


class ResolvedSession(BaseModel):
    """Result of one session resolution: session and (possibly missing) profile."""
    session: Optional[Session] = None
    profile: Optional[UserProfile] = None
    has_knowledge_base: bool = False

    @property
    def org_id(self) -> Optional[str]:
        return self.profile.org_id if self.profile else None


class SessionResponse(BaseModel):
    """Public view of the resolved session."""
    authenticated: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    profile: Optional[UserProfile] = None
    has_knowledge_base: bool = False


# ============================================================================
# Auth pass-through
# ============================================================================


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr
    redirect_url: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    access_token: str
    new_password: str = Field(..., min_length=6)


class AuthTokens(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    message: str = ""


# ============================================================================
# Route gate
# ============================================================================


class GateRequirement(str, Enum):
    ANONYMOUS = "anonymous"
    SESSION = "session"
    ORG = "org"
    KNOWLEDGE_BASE = "knowledge_base"


class GateAction(str, Enum):
    RENDER = "render"
    LOADING = "loading"
    REDIRECT = "redirect"


class GateDecision(BaseModel):
    action: GateAction
    redirect_to: Optional[str] = None
    requirement: Optional[GateRequirement] = None
