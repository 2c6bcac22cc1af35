"""SOP library operations."""

import logging

from app.core.errors import NotFoundError
from app.core.logging import get_logger, log_event
from app.core.schemas_sops import SOP, SOPCreate, SOPDetail, SOPStep, SOPUpdate
from app.db import sops as sops_db
from app.db.sop_steps import list_steps

logger = get_logger(__name__)


def require_sop(org_id: str, sop_id: str) -> dict:
    """
    Load a live SOP of the caller's org.

    Raises:
        NotFoundError: Missing, soft-deleted, or owned by another org
    """
    sop = sops_db.get_sop(org_id, sop_id)
    if not sop:
        raise NotFoundError(f"SOP {sop_id} not found")
    return sop


def list_sops(org_id: str) -> list[SOP]:
    rows = sops_db.list_sops(org_id)
    log_event(logger, logging.INFO, "sop_library_fetch_success", count=len(rows))
    return [SOP(**row) for row in rows]


def get_sop_detail(org_id: str, sop_id: str) -> SOPDetail:
    sop = require_sop(org_id, sop_id)
    steps = [SOPStep(**s) for s in list_steps(sop_id)]
    log_event(logger, logging.INFO, "sop_detail_fetch_success", sop_id=sop_id, step_count=len(steps))
    return SOPDetail(**sop, steps=steps)


def create_custom_sop(org_id: str, user_id: str, data: SOPCreate) -> SOP:
    log_event(logger, logging.INFO, "sop_create_attempt", title=data.title)
    row = sops_db.create_sop(
        org_id,
        user_id,
        {
            "title": data.title.strip(),
            "category": (data.category or "").strip(),
            "purpose": (data.purpose or "").strip(),
            "frequency": (data.frequency or "").strip(),
        },
    )
    log_event(logger, logging.INFO, "sop_create_success", sop_id=row.get("id"))
    return SOP(**row)


def update_sop(org_id: str, sop_id: str, data: SOPUpdate) -> SOPDetail:
    updates = data.model_dump(exclude_unset=True)
    require_sop(org_id, sop_id)
    if updates:
        sops_db.update_sop(org_id, sop_id, updates)
        log_event(logger, logging.INFO, "sop_detail_update_success", sop_id=sop_id)
    return get_sop_detail(org_id, sop_id)


def delete_sop(org_id: str, sop_id: str) -> None:
    if not sops_db.soft_delete_sop(org_id, sop_id):
        raise NotFoundError(f"SOP {sop_id} not found")
    log_event(logger, logging.INFO, "sop_delete", sop_id=sop_id)
