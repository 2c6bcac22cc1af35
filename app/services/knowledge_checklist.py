"""Knowledge checklist and knowledge base build.

Every item action is one single-item update. Status changes follow the
transition table in app.core.knowledge_status; anything else is rejected
before touching the store.
"""

import logging
from typing import Optional

from app.core.ai_client import invoke_action
from app.core.errors import AIProxyError, BuildGateError, KnowledgeInputError, NotFoundError
from app.core.knowledge_status import CONTENT_STATUSES, is_handled, validate_transition
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import AIAction, ChecklistData, IngestData
from app.core.schemas_knowledge import (
    BuildGate,
    ChecklistGroups,
    InterviewStatus,
    KnowledgeBase,
    KnowledgeItem,
    KnowledgeItemCreate,
    KnowledgeItemStatus,
    KnowledgeItemType,
    KnowledgePriority,
    KnowledgeSourceCreate,
)
from app.core.single_flight import generation_flights
from app.db import knowledge_base, knowledge_items
from app.db.knowledge_interviews import get_latest_interview
from app.db.orgs import get_org

logger = get_logger(__name__)

PROVIDED_FIELDS = ("provided_url", "provided_file", "provided_text", "provided_transcript")

SOURCE_CONTENT_FIELDS = {
    KnowledgeItemType.LINK: "provided_url",
    KnowledgeItemType.PDF: "provided_file",
    KnowledgeItemType.DOCUMENT: "provided_text",
    KnowledgeItemType.OTHER: "provided_text",
    KnowledgeItemType.VOICE: "provided_transcript",
}


def _items(org_id: str) -> list[KnowledgeItem]:
    return [KnowledgeItem(**row) for row in knowledge_items.list_knowledge_items(org_id)]


def _require_item(org_id: str, item_id: str) -> KnowledgeItem:
    row = knowledge_items.get_knowledge_item(org_id, item_id)
    if not row:
        raise NotFoundError(f"Knowledge item {item_id} not found")
    return KnowledgeItem(**row)


def _interview_profile(org_id: str) -> Optional[dict]:
    interview = get_latest_interview(org_id)
    if interview and interview.get("status") == InterviewStatus.COMPLETE.value:
        return interview.get("answers")
    return None


# ============================================================================
# Checklist
# ============================================================================


def group_items(items: list[KnowledgeItem]) -> ChecklistGroups:
    """Group by priority for display and count handled items."""
    groups = ChecklistGroups(total=len(items))
    for item in items:
        getattr(groups, item.priority.value).append(item)
        if is_handled(item.status.value):
            groups.handled += 1
    return groups


def list_checklist(org_id: str) -> ChecklistGroups:
    return group_items(_items(org_id))


async def generate_checklist(org_id: str, token: Optional[str] = None) -> ChecklistGroups:
    """
    Seed the checklist from the AI proxy; does nothing if items already exist.

    Raises:
        NotFoundError: Org does not exist
        AIProxyError: Generation failed
    """
    existing = _items(org_id)
    if existing:
        return group_items(existing)

    org = get_org(org_id)
    if not org:
        raise NotFoundError(f"Organization {org_id} not found")

    payload = {
        "industry_type": org.get("industry_type") or "",
        "state": org.get("state") or "",
        "county": org.get("county") or "",
        "city": org.get("city") or "",
        "profile": _interview_profile(org_id),
    }

    async def _generate() -> ChecklistGroups:
        if _items(org_id):
            return group_items(_items(org_id))
        log_event(logger, logging.INFO, "knowledge_checklist_generate_start", org_id=org_id)
        try:
            data = await invoke_action(
                AIAction.GENERATE_KNOWLEDGE_CHECKLIST, payload, ChecklistData, token=token
            )
        except AIProxyError as e:
            log_event(logger, logging.ERROR, "knowledge_checklist_generate_error", org_id=org_id, message=e.message)
            raise

        rows = [
            {**draft.model_dump(mode="json"), "sort_order": index + 1}
            for index, draft in enumerate(data.items)
        ]
        knowledge_items.insert_knowledge_items(org_id, rows)
        log_event(logger, logging.INFO, "knowledge_checklist_generate_success", org_id=org_id, count=len(rows))
        return group_items(_items(org_id))

    return await generation_flights.run(("checklist", org_id), _generate)


def _next_sort_order(org_id: str) -> int:
    existing = _items(org_id)
    return max((i.sort_order or 0) for i in existing) + 1 if existing else 1


def add_item(org_id: str, data: KnowledgeItemCreate) -> KnowledgeItem:
    """Add a custom item after the current highest sort order."""
    next_sort = _next_sort_order(org_id)
    rows = knowledge_items.insert_knowledge_items(
        org_id,
        [
            {
                "title": data.title.strip(),
                "description": data.description.strip(),
                "type": data.type.value,
                "priority": data.priority.value,
                "level": data.level.value,
                "sort_order": next_sort,
            }
        ],
    )
    log_event(logger, logging.INFO, "knowledge_item_add", org_id=org_id, sort_order=next_sort)
    return KnowledgeItem(**rows[0])


def add_source(org_id: str, data: KnowledgeSourceCreate) -> KnowledgeItem:
    """
    Add a source that is provided on arrival.

    Raises:
        KnowledgeInputError: Title or content is blank
    """
    title = _require_value(data.title, "Title")
    field = SOURCE_CONTENT_FIELDS[data.type]
    next_sort = _next_sort_order(org_id)
    rows = knowledge_items.insert_knowledge_items(
        org_id,
        [
            {
                "title": title,
                "description": data.description.strip(),
                "type": data.type.value,
                "priority": KnowledgePriority.RECOMMENDED.value,
                "level": data.level.value,
                "status": KnowledgeItemStatus.PROVIDED.value,
                "sort_order": next_sort,
                field: _require_value(data.content, "Content"),
            }
        ],
    )
    log_event(logger, logging.INFO, "knowledge_source_add", org_id=org_id, type=data.type.value)
    return KnowledgeItem(**rows[0])


def delete_item(org_id: str, item_id: str) -> None:
    if not knowledge_items.soft_delete_knowledge_item(org_id, item_id):
        raise NotFoundError(f"Knowledge item {item_id} not found")
    log_event(logger, logging.INFO, "knowledge_item_delete", item_id=item_id)



def _apply(org_id: str, item: KnowledgeItem, target: KnowledgeItemStatus, updates: dict, action: str) -> KnowledgeItem:
    validate_transition(item.status.value, target.value)
    row = knowledge_items.update_knowledge_item(org_id, item.id, {**updates, "status": target.value})
    if not row:
        raise NotFoundError(f"Knowledge item {item.id} not found")
    log_event(logger, logging.INFO, "knowledge_item_update", item_id=item.id, action=action, status=target.value)
    return KnowledgeItem(**row)


def _require_type(item: KnowledgeItem, *types: KnowledgeItemType) -> None:
    if item.type not in types:
        allowed = ", ".join(t.value for t in types)
        raise KnowledgeInputError(f"Item type {item.type.value} does not accept this input (expected {allowed})")


def _require_value(value: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise KnowledgeInputError(f"{label} is required")
    return value


def use_suggested_source(org_id: str, item_id: str) -> KnowledgeItem:
    """Accept the item's suggested link as the provided URL."""
    item = _require_item(org_id, item_id)
    _require_type(item, KnowledgeItemType.LINK)
    if not item.suggested_source:
        raise KnowledgeInputError("Item has no suggested source")
    return _apply(
        org_id, item, KnowledgeItemStatus.PROVIDED, {"provided_url": item.suggested_source}, "use_suggested"
    )


def provide_url(org_id: str, item_id: str, url: str) -> KnowledgeItem:
    item = _require_item(org_id, item_id)
    _require_type(item, KnowledgeItemType.LINK)
    return _apply(org_id, item, KnowledgeItemStatus.PROVIDED, {"provided_url": _require_value(url, "URL")}, "save_url")


def provide_file(org_id: str, item_id: str, filename: str) -> KnowledgeItem:
    item = _require_item(org_id, item_id)
    _require_type(item, KnowledgeItemType.PDF)
    return _apply(
        org_id, item, KnowledgeItemStatus.PROVIDED, {"provided_file": _require_value(filename, "File name")}, "save_file"
    )


def provide_text(org_id: str, item_id: str, text: str) -> KnowledgeItem:
    item = _require_item(org_id, item_id)
    _require_type(item, KnowledgeItemType.DOCUMENT, KnowledgeItemType.OTHER)
    return _apply(org_id, item, KnowledgeItemStatus.PROVIDED, {"provided_text": _require_value(text, "Text")}, "save_text")


def provide_transcript(org_id: str, item_id: str, transcript: str) -> KnowledgeItem:
    item = _require_item(org_id, item_id)
    _require_type(item, KnowledgeItemType.VOICE)
    return _apply(
        org_id,
        item,
        KnowledgeItemStatus.PROVIDED,
        {"provided_transcript": _require_value(transcript, "Transcript")},
        "save_transcript",
    )


def skip_item(org_id: str, item_id: str) -> KnowledgeItem:
    item = _require_item(org_id, item_id)
    return _apply(org_id, item, KnowledgeItemStatus.SKIPPED, {}, "skip")


def reopen_item(org_id: str, item_id: str) -> KnowledgeItem:
    """Return an item to pending and clear whatever was provided."""
    item = _require_item(org_id, item_id)
    return _apply(org_id, item, KnowledgeItemStatus.PENDING, {field: None for field in PROVIDED_FIELDS}, "reopen")


# ============================================================================
# Knowledge base
# ============================================================================


def build_gate(items: list[KnowledgeItem]) -> BuildGate:
    """Building is allowed once no REQUIRED item is still pending."""
    pending_required = [
        item.title
        for item in items
        if item.priority == KnowledgePriority.REQUIRED and item.status == KnowledgeItemStatus.PENDING
    ]
    source_count = sum(1 for item in items if item.status in CONTENT_STATUSES)
    return BuildGate(
        can_build=not pending_required,
        pending_required=pending_required,
        source_count=source_count,
    )


def get_build_gate(org_id: str) -> BuildGate:
    return build_gate(_items(org_id))


def get_knowledge_base(org_id: str) -> Optional[KnowledgeBase]:
    row = knowledge_base.get_knowledge_base(org_id)
    return KnowledgeBase(**row) if row else None


async def build_knowledge_base(org_id: str, token: Optional[str] = None) -> KnowledgeBase:
    """
    Synthesize the org's knowledge base from provided and learned items.

    Raises:
        BuildGateError: Required items are pending, or nothing was provided
        AIProxyError: Ingestion failed
    """
    items = _items(org_id)
    gate = build_gate(items)
    if not gate.can_build:
        raise BuildGateError(
            f"Required items still pending: {', '.join(gate.pending_required)}"
        )
    sources = [item for item in items if item.status in CONTENT_STATUSES]
    if not sources:
        raise BuildGateError("Provide at least one knowledge source before building")

    payload = {
        "profile": _interview_profile(org_id),
        "items": [
            item.model_dump(
                mode="json",
                include={"title", "description", "type", "level", *PROVIDED_FIELDS},
            )
            for item in sources
        ],
    }

    async def _build() -> KnowledgeBase:
        log_event(logger, logging.INFO, "knowledge_base_build_start", org_id=org_id, source_count=len(sources))
        try:
            data = await invoke_action(AIAction.INGEST_KNOWLEDGE, payload, IngestData, token=token)
        except AIProxyError as e:
            log_event(logger, logging.ERROR, "knowledge_base_build_error", org_id=org_id, message=e.message)
            raise
        row = knowledge_base.upsert_knowledge_base(
            org_id, data.summary, data.learned_topics, len(sources)
        )
        log_event(logger, logging.INFO, "knowledge_base_build_success", org_id=org_id)
        return KnowledgeBase(**row)

    return await generation_flights.run(("knowledge-base", org_id), _build)
