"""Route gate decisions.

Pure functions mapping (route, resolved session) to render / loading /
redirect. The same decision backs the client navigation endpoint and the
API dependencies in auth_middleware; neither replaces the row-level policies
in the data store.
"""

import re
from typing import Optional

from app.core.schemas_auth import (
    GateAction,
    GateDecision,
    GateRequirement,
    ResolvedSession,
)

DASHBOARD_PATH = "/dashboard"
LOGIN_PATH = "/login"
ONBOARDING_PATH = "/onboarding"
KNOWLEDGE_PATH = "/knowledge"

# (path pattern, requirement), first match wins
ROUTE_TABLE: list[tuple[re.Pattern, GateRequirement]] = [
    (re.compile(r"^/(login|signup|forgot-password|reset-password)$"), GateRequirement.ANONYMOUS),
    (re.compile(r"^/onboarding$"), GateRequirement.SESSION),
    (re.compile(r"^/knowledge$"), GateRequirement.ORG),
    (re.compile(r"^/$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/dashboard$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/sops$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/sops/[^/]+$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/sops/[^/]+/build/[^/]+$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/profile$"), GateRequirement.KNOWLEDGE_BASE),
    (re.compile(r"^/readiness$"), GateRequirement.KNOWLEDGE_BASE),
]


def normalize_path(path: str) -> str:
    path = (path or "/").split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def requirement_for(path: str) -> Optional[GateRequirement]:
    """Requirement for a client route, or None for an unknown route."""
    normalized = normalize_path(path)
    for pattern, requirement in ROUTE_TABLE:
        if pattern.match(normalized):
            return requirement
    return None


def decide(
    requirement: GateRequirement,
    resolved: ResolvedSession,
    loading: bool = False,
) -> GateDecision:
    """
    Decide what to do with a navigation.

    Args:
        requirement: What the route needs
        resolved: Current session resolution
        loading: True while the session is still being resolved

    Returns:
        GateDecision
    """
    if loading:
        return GateDecision(action=GateAction.LOADING, requirement=requirement)

    if requirement == GateRequirement.ANONYMOUS:
        if resolved.session is not None:
            return GateDecision(action=GateAction.REDIRECT, redirect_to=DASHBOARD_PATH, requirement=requirement)
        return GateDecision(action=GateAction.RENDER, requirement=requirement)

    if resolved.session is None:
        return GateDecision(action=GateAction.REDIRECT, redirect_to=LOGIN_PATH, requirement=requirement)

    needs_org = requirement in (GateRequirement.ORG, GateRequirement.KNOWLEDGE_BASE)
    # A missing profile is "profile unavailable", not "no organization"
    if needs_org and resolved.profile is not None and not resolved.profile.org_id:
        return GateDecision(action=GateAction.REDIRECT, redirect_to=ONBOARDING_PATH, requirement=requirement)

    if requirement == GateRequirement.KNOWLEDGE_BASE and not resolved.has_knowledge_base:
        return GateDecision(action=GateAction.REDIRECT, redirect_to=KNOWLEDGE_PATH, requirement=requirement)

    return GateDecision(action=GateAction.RENDER, requirement=requirement)


def decide_for_path(path: str, resolved: ResolvedSession, loading: bool = False) -> GateDecision:
    """Gate decision for a client path; unknown paths fall back to the dashboard."""
    requirement = requirement_for(path)
    if requirement is None:
        return GateDecision(action=GateAction.REDIRECT, redirect_to=DASHBOARD_PATH)
    return decide(requirement, resolved, loading=loading)
