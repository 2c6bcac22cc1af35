"""Manager readiness tracking."""

import logging
from typing import Optional

from app.core.errors import NotFoundError
from app.core.logging import get_logger, log_event
from app.core.readiness_template import default_readiness_rows
from app.core.schemas_readiness import (
    ReadinessGroup,
    ReadinessItem,
    ReadinessItemCreate,
    ReadinessOverview,
    ReadinessStatus,
)
from app.db import readiness_items
from app.db.orgs import get_org
from app.services.sops import require_sop

logger = get_logger(__name__)


def group_readiness(items: list[ReadinessItem]) -> list[ReadinessGroup]:
    """Group items in first-seen order of their group."""
    groups: dict[str, ReadinessGroup] = {}
    for item in items:
        group = groups.get(item.group_key)
        if group is None:
            group = ReadinessGroup(group_key=item.group_key, group_label=item.group_label)
            groups[item.group_key] = group
        group.items.append(item)
        group.total += 1
        if item.status == ReadinessStatus.READY:
            group.ready += 1
    return list(groups.values())


def get_overview(org_id: str) -> ReadinessOverview:
    """Readiness checklist for an org, seeding the default template on first visit."""
    org = get_org(org_id) or {}
    rows = readiness_items.list_readiness_items(org_id)
    seeded = False
    if not rows:
        readiness_items.insert_readiness_items(org_id, default_readiness_rows())
        rows = readiness_items.list_readiness_items(org_id)
        seeded = True
        log_event(logger, logging.INFO, "readiness_seeded", org_id=org_id, count=len(rows))

    log_event(logger, logging.INFO, "readiness_page_loaded", org_id=org_id)
    return ReadinessOverview(
        manager_name=org.get("manager_name"),
        groups=group_readiness([ReadinessItem(**row) for row in rows]),
        seeded=seeded,
    )


def set_status(org_id: str, item_id: str, status: Optional[ReadinessStatus]) -> ReadinessItem:
    row = readiness_items.update_readiness_item(
        org_id, item_id, {"status": status.value if status else None}
    )
    if not row:
        raise NotFoundError(f"Readiness item {item_id} not found")
    log_event(logger, logging.INFO, "readiness_status_update", item_id=item_id, status=status.value if status else None)
    return ReadinessItem(**row)


def add_custom_item(org_id: str, data: ReadinessItemCreate) -> ReadinessItem:
    existing = readiness_items.list_readiness_items(org_id)
    next_sort = max((row.get("sort_order") or 0) for row in existing) + 1 if existing else 1
    rows = readiness_items.insert_readiness_items(
        org_id,
        [
            {
                "group_key": data.group_key,
                "group_label": data.group_label,
                "title": data.title.strip(),
                "description": (data.description or "").strip() or None,
                "status": None,
                "is_custom": True,
                "sort_order": next_sort,
            }
        ],
    )
    log_event(logger, logging.INFO, "readiness_item_add", org_id=org_id)
    return ReadinessItem(**rows[0])


def link_sop(org_id: str, item_id: str, sop_id: str) -> ReadinessItem:
    """Link a readiness item to an SOP of the same org."""
    require_sop(org_id, sop_id)
    row = readiness_items.update_readiness_item(org_id, item_id, {"sop_id": sop_id})
    if not row:
        raise NotFoundError(f"Readiness item {item_id} not found")
    log_event(logger, logging.INFO, "readiness_link_sop", item_id=item_id, sop_id=sop_id)
    return ReadinessItem(**row)


def delete_item(org_id: str, item_id: str) -> None:
    if not readiness_items.soft_delete_readiness_item(org_id, item_id):
        raise NotFoundError(f"Readiness item {item_id} not found")
    log_event(logger, logging.INFO, "readiness_item_delete", item_id=item_id)
