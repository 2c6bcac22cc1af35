"""SOP recommendation workflow."""

import logging
from typing import Optional

from app.core.ai_client import invoke_action
from app.core.errors import AIProxyError, NotFoundError
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import AIAction, RecommendationsData
from app.core.schemas_sops import SOP, RecommendationStatus, SOPRecommendation
from app.db import sop_recommendations
from app.db.governing_bodies import list_governing_bodies
from app.db.orgs import get_org
from app.db.sops import create_sop

logger = get_logger(__name__)


def list_recommendations(org_id: str) -> list[SOPRecommendation]:
    return [SOPRecommendation(**row) for row in sop_recommendations.list_recommendations(org_id)]


async def generate_recommendations(org_id: str, token: Optional[str] = None) -> list[SOPRecommendation]:
    """
    Ask the AI proxy for SOPs this org should have and store them as suggestions.

    Raises:
        NotFoundError: Org does not exist
        AIProxyError: Generation failed
    """
    org = get_org(org_id)
    if not org:
        raise NotFoundError(f"Organization {org_id} not found")

    payload = {
        "industry_type": org.get("industry_type") or "",
        "state": org.get("state") or "",
        "county": org.get("county") or "",
        "governing_bodies": [
            {"name": gb["name"], "level": gb["level"]} for gb in list_governing_bodies(org_id)
        ],
    }
    log_event(logger, logging.INFO, "recommendations_generate_start", org_id=org_id)
    try:
        data = await invoke_action(AIAction.RECOMMEND_SOPS, payload, RecommendationsData, token=token)
    except AIProxyError as e:
        log_event(logger, logging.ERROR, "recommendations_generate_error", org_id=org_id, message=e.message)
        raise

    rows = sop_recommendations.insert_recommendations(
        org_id, [rec.model_dump() for rec in data.recommendations]
    )
    log_event(logger, logging.INFO, "recommendations_generate_success", org_id=org_id, count=len(rows))
    return [SOPRecommendation(**row) for row in rows]


def start_recommendation(org_id: str, user_id: str, recommendation_id: str) -> SOP:
    """Create a draft SOP from a suggestion and mark the suggestion started."""
    rec = sop_recommendations.get_recommendation(org_id, recommendation_id)
    if not rec:
        raise NotFoundError(f"Recommendation {recommendation_id} not found")

    sop = create_sop(
        org_id,
        user_id,
        {
            "title": rec["title"],
            "category": rec.get("category"),
            "purpose": rec.get("description"),
        },
    )
    sop_recommendations.mark_recommendation_started(org_id, recommendation_id, sop["id"])
    log_event(
        logger,
        logging.INFO,
        "recommendation_started",
        recommendation_id=recommendation_id,
        sop_id=sop["id"],
        status=RecommendationStatus.STARTED.value,
    )
    return SOP(**sop)
