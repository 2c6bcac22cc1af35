"""Knowledge interview: a turn-based chat that builds the business profile.

Assistant turns are stored as the JSON text of the AI reply so progress
counters survive a reload. The whole history is written after every turn.
"""

import json
import logging
from typing import Optional

from app.core.ai_client import invoke_action
from app.core.errors import AIProxyError, KnowledgeInputError, NotFoundError
from app.core.logging import get_logger, log_event
from app.core.schemas_ai import AIAction, InterviewReply
from app.core.schemas_knowledge import (
    ChatMessage,
    InterviewProgress,
    InterviewStatus,
    InterviewView,
    KnowledgeInterview,
)
from app.core.single_flight import generation_flights
from app.db import knowledge_interviews
from app.db.orgs import get_org

logger = get_logger(__name__)


def _parse_assistant(content: str) -> Optional[dict]:
    try:
        parsed = json.loads(content)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def build_view(interview: KnowledgeInterview) -> InterviewView:
    """Derive progress and the latest question from the stored history."""
    progress = None
    last_question = None
    for message in reversed(interview.messages):
        if message.role != "assistant":
            continue
        parsed = _parse_assistant(message.content)
        if parsed is None:
            last_question = message.content
        else:
            last_question = parsed.get("message")
            if parsed.get("question_number") and parsed.get("total_expected"):
                progress = InterviewProgress(
                    current=parsed["question_number"], total=parsed["total_expected"]
                )
        break
    return InterviewView(interview=interview, progress=progress, last_question=last_question)


def _org_context(org_id: str) -> dict:
    org = get_org(org_id)
    if not org:
        raise NotFoundError(f"Organization {org_id} not found")
    return {
        "industry_type": org.get("industry_type"),
        "state": org.get("state"),
        "county": org.get("county"),
    }


async def _ask(
    org_id: str,
    interview: KnowledgeInterview,
    messages: list[ChatMessage],
    token: Optional[str],
) -> KnowledgeInterview:
    payload = {
        **_org_context(org_id),
        "messages": [m.model_dump() for m in messages],
    }
    try:
        reply = await invoke_action(AIAction.KNOWLEDGE_INTERVIEW, payload, InterviewReply, token=token)
    except AIProxyError as e:
        log_event(logger, logging.ERROR, "knowledge_ai_error", interview_id=interview.id, message=e.message)
        raise

    assistant = ChatMessage(role="assistant", content=reply.model_dump_json(exclude_none=True))
    updated = [*messages, assistant]
    updates = {"messages": [m.model_dump() for m in updated]}
    if reply.done:
        updates["answers"] = reply.profile.model_dump() if reply.profile else None
        updates["status"] = InterviewStatus.COMPLETE.value

    row = knowledge_interviews.update_interview(org_id, interview.id, updates)
    if not row:
        raise NotFoundError(f"Interview {interview.id} not found")

    if reply.done:
        log_event(logger, logging.INFO, "knowledge_interview_complete", interview_id=interview.id)
    return KnowledgeInterview(**row)


async def _open(org_id: str, interview: KnowledgeInterview, token: Optional[str]) -> KnowledgeInterview:
    # Another request may already have asked the first question
    row = knowledge_interviews.get_latest_interview(org_id)
    current = KnowledgeInterview(**row) if row else interview
    if current.messages or current.status == InterviewStatus.COMPLETE:
        return current
    return await _ask(org_id, current, [], token)


async def load_interview(org_id: str, token: Optional[str] = None) -> InterviewView:
    """
    Load the org's latest interview, creating one if none exists.

    An in-progress interview with no messages gets its first question
    immediately.
    """
    log_event(logger, logging.INFO, "knowledge_load_start", org_id=org_id)
    row = knowledge_interviews.get_latest_interview(org_id)
    if row is None:
        row = knowledge_interviews.create_interview(org_id)
        log_event(logger, logging.INFO, "knowledge_interview_created", interview_id=row.get("id"))

    interview = KnowledgeInterview(**row)
    if interview.status == InterviewStatus.COMPLETE:
        log_event(logger, logging.INFO, "knowledge_load_complete", interview_id=interview.id)
        return build_view(interview)

    if not interview.messages:
        interview = await generation_flights.run(
            ("interview", org_id), lambda: _open(org_id, interview, token)
        )
    return build_view(interview)


async def send_message(org_id: str, content: str, token: Optional[str] = None) -> InterviewView:
    """
    Append the user's answer and ask the next question.

    Raises:
        NotFoundError: The org has no interview
        KnowledgeInputError: The answer is blank or the interview is complete
    """
    answer = (content or "").strip()
    if not answer:
        raise KnowledgeInputError("Answer is required")

    row = knowledge_interviews.get_latest_interview(org_id)
    if row is None:
        raise NotFoundError("No interview in progress")

    interview = KnowledgeInterview(**row)
    if interview.status == InterviewStatus.COMPLETE:
        raise KnowledgeInputError("Interview is already complete; restart it to answer again")

    messages = [*interview.messages, ChatMessage(role="user", content=answer)]
    interview = await _ask(org_id, interview, messages, token)
    return build_view(interview)


async def restart_interview(org_id: str, token: Optional[str] = None) -> InterviewView:
    """Reset the interview (status, messages, answers) and ask the first question again."""
    row = knowledge_interviews.get_latest_interview(org_id)
    if row is None:
        raise NotFoundError("No interview to restart")

    reset = knowledge_interviews.update_interview(
        org_id,
        row["id"],
        {"status": InterviewStatus.IN_PROGRESS.value, "messages": [], "answers": None},
    )
    if not reset:
        raise NotFoundError(f"Interview {row['id']} not found")
    log_event(logger, logging.INFO, "knowledge_interview_restart", interview_id=row["id"])

    interview = await _ask(org_id, KnowledgeInterview(**reset), [], token)
    return build_view(interview)
