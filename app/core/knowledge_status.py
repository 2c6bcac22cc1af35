"""Knowledge item status transitions."""

from app.core.errors import KnowledgeStatusTransitionError
from app.core.schemas_knowledge import KnowledgeItemStatus

# Transitions reachable through checklist actions
ALLOWED_TRANSITIONS: dict[KnowledgeItemStatus, set[KnowledgeItemStatus]] = {
    KnowledgeItemStatus.PENDING: {KnowledgeItemStatus.PROVIDED, KnowledgeItemStatus.SKIPPED},
    KnowledgeItemStatus.PROVIDED: {KnowledgeItemStatus.PENDING},
    KnowledgeItemStatus.SKIPPED: {KnowledgeItemStatus.PENDING},
    KnowledgeItemStatus.LEARNED: {KnowledgeItemStatus.PENDING},
}

HANDLED_STATUSES = {
    KnowledgeItemStatus.PROVIDED,
    KnowledgeItemStatus.LEARNED,
    KnowledgeItemStatus.SKIPPED,
}

# Items whose content feeds the knowledge base build
CONTENT_STATUSES = {KnowledgeItemStatus.PROVIDED, KnowledgeItemStatus.LEARNED}


def can_transition(current: str, target: str) -> bool:
    try:
        from_status = KnowledgeItemStatus(current)
        to_status = KnowledgeItemStatus(target)
    except ValueError:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(current: str, target: str) -> None:
    """
    Validate a knowledge item status change.

    Raises:
        KnowledgeStatusTransitionError: If the edge is not allowed
    """
    if not can_transition(current, target):
        raise KnowledgeStatusTransitionError(
            f"Cannot move knowledge item from '{current}' to '{target}'"
        )


def is_handled(status: str) -> bool:
    try:
        return KnowledgeItemStatus(status) in HANDLED_STATUSES
    except ValueError:
        return False
