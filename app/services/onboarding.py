"""Onboarding and business profile workflows."""

import logging

from app.core.errors import NotFoundError, OnboardingConflictError, OnboardingValidationError
from app.core.logging import get_logger, log_event
from app.core.schemas_auth import ResolvedSession
from app.core.schemas_orgs import (
    OTHER_INDUSTRY,
    BusinessProfileForm,
    BusinessProfileResponse,
    GoverningBody,
    OnboardingRequest,
    Organization,
    ProfileUpdateRequest,
)
from app.core.session_resolver import resolve_session
from app.db.governing_bodies import (
    insert_governing_bodies,
    list_governing_bodies,
    soft_delete_governing_bodies,
)
from app.db.orgs import create_org, get_org, update_org
from app.db.users import set_user_org

logger = get_logger(__name__)


def validate_business_form(form: BusinessProfileForm) -> list[str]:
    """Return the list of validation problems (empty when valid)."""
    problems = []
    if not form.name.strip():
        problems.append("Business name is required")
    if not form.industry_type:
        problems.append("Industry is required")
    elif form.industry_type == OTHER_INDUSTRY and not (form.industry_custom_label or "").strip():
        problems.append("Describe your industry when choosing Other")
    if not form.state:
        problems.append("State is required")
    if not form.county.strip():
        problems.append("County is required")
    if not form.city.strip():
        problems.append("City is required")
    return problems


def _org_fields(form: BusinessProfileForm) -> dict:
    return {
        "name": form.name.strip(),
        "industry_type": form.industry_type,
        "industry_custom_label": (
            (form.industry_custom_label or "").strip() if form.industry_type == OTHER_INDUSTRY else None
        ),
        "state": form.state,
        "county": form.county.strip(),
        "city": form.city.strip(),
    }


def _governing_body_rows(form: BusinessProfileForm) -> list[dict]:
    return [
        {"name": gb.name.strip(), "level": gb.level.value, "url": (gb.url or "").strip() or None}
        for gb in form.governing_bodies
    ]


async def complete_onboarding(
    user_id: str,
    current_org_id: str | None,
    token: str,
    request: OnboardingRequest,
) -> ResolvedSession:
    """
    Create the caller's organization and attach their profile to it.

    Args:
        user_id: Caller's auth user ID
        current_org_id: Caller's org, if they already have one
        token: Caller's access token, used to re-resolve the session
        request: Onboarding form

    Returns:
        The session re-resolved after the profile gained its org

    Raises:
        OnboardingConflictError: Caller already belongs to an org
        OnboardingValidationError: Form is incomplete
    """
    if current_org_id:
        raise OnboardingConflictError("You already belong to an organization")

    problems = validate_business_form(request)
    if not request.governing_bodies and not request.none_apply:
        problems.append("Add at least one governing body or confirm that none apply")
    if problems:
        raise OnboardingValidationError("; ".join(problems))

    log_event(logger, logging.INFO, "onboarding_submit", user_id=user_id)

    org = create_org(_org_fields(request), created_by=user_id)
    org_id = org["id"]
    insert_governing_bodies(org_id, _governing_body_rows(request))
    set_user_org(user_id, org_id)

    log_event(
        logger,
        logging.INFO,
        "onboarding_complete",
        org_id=org_id,
        gb_count=len(request.governing_bodies),
    )
    return await resolve_session(token)


def get_business_profile(org_id: str) -> BusinessProfileResponse:
    org = get_org(org_id)
    if not org:
        raise NotFoundError(f"Organization {org_id} not found")

    bodies = list_governing_bodies(org_id)
    log_event(logger, logging.INFO, "profile_fetch_success", org_id=org_id, gb_count=len(bodies))
    return BusinessProfileResponse(
        org=Organization(**org),
        governing_bodies=[GoverningBody(**gb) for gb in bodies],
    )


def update_business_profile(org_id: str, request: ProfileUpdateRequest) -> BusinessProfileResponse:
    """
    Update org fields and replace its governing bodies wholesale.

    Raises:
        OnboardingValidationError: Form is incomplete
        NotFoundError: Org does not exist
    """
    problems = validate_business_form(request)
    if problems:
        raise OnboardingValidationError("; ".join(problems))

    log_event(logger, logging.INFO, "profile_update_attempt", org_id=org_id)

    if not update_org(org_id, _org_fields(request)):
        raise NotFoundError(f"Organization {org_id} not found")

    if list_governing_bodies(org_id):
        soft_delete_governing_bodies(org_id)
    insert_governing_bodies(org_id, _governing_body_rows(request))

    log_event(logger, logging.INFO, "profile_update_success", org_id=org_id, gb_count=len(request.governing_bodies))
    return get_business_profile(org_id)
