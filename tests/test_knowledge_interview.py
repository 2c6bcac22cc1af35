"""Tests for the knowledge interview chat."""

import asyncio
import json

import pytest

from app.core.errors import AIProxyReportedError, KnowledgeInputError
from app.core.schemas_ai import AIAction
from app.core.schemas_knowledge import InterviewStatus
from app.services import knowledge_interview

FIRST = {"message": "What services do you provide?", "question_number": 1, "total_expected": 8}
SECOND = {"message": "How many residents?", "question_number": 2, "total_expected": 8}
DONE = {
    "message": "Thanks, that's everything.",
    "question_number": 8,
    "total_expected": 8,
    "done": True,
    "profile": {"services": ["personal care"], "staff_count_range": "1-5"},
}


@pytest.mark.asyncio
async def test_load_creates_interview_and_asks_first_question(fake_db, fake_ai, org):
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)

    view = await knowledge_interview.load_interview(org["id"])

    assert view.last_question == "What services do you provide?"
    assert view.progress.current == 1
    assert view.progress.total == 8
    stored = fake_db.rows("knowledge_interviews", org_id=org["id"])
    assert len(stored) == 1
    assert json.loads(stored[0]["messages"][0]["content"])["question_number"] == 1


@pytest.mark.asyncio
async def test_concurrent_loads_ask_once(fake_db, fake_ai, org):
    fake_db.seed("knowledge_interviews", org_id=org["id"], status="in_progress", messages=[])
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)

    await asyncio.gather(
        knowledge_interview.load_interview(org["id"]),
        knowledge_interview.load_interview(org["id"]),
    )

    assert fake_ai.count(AIAction.KNOWLEDGE_INTERVIEW) == 1


@pytest.mark.asyncio
async def test_answer_gets_next_question(fake_db, fake_ai, org):
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)
    await knowledge_interview.load_interview(org["id"])

    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, SECOND)
    view = await knowledge_interview.send_message(org["id"], "  Personal care  ")

    roles = [m.role for m in view.interview.messages]
    assert roles == ["assistant", "user", "assistant"]
    assert view.interview.messages[1].content == "Personal care"
    assert view.progress.current == 2
    _, payload = fake_ai.calls[-1]
    assert payload["messages"][-1] == {"role": "user", "content": "Personal care"}


@pytest.mark.asyncio
async def test_final_answer_completes_interview(fake_db, fake_ai, org):
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)
    await knowledge_interview.load_interview(org["id"])

    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, DONE)
    view = await knowledge_interview.send_message(org["id"], "Three residents")

    assert view.interview.status == InterviewStatus.COMPLETE
    assert view.interview.answers.services == ["personal care"]


@pytest.mark.asyncio
async def test_failed_turn_keeps_history(fake_db, fake_ai, org):
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)
    await knowledge_interview.load_interview(org["id"])

    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, error="rate limited")
    with pytest.raises(AIProxyReportedError):
        await knowledge_interview.send_message(org["id"], "Personal care")

    stored = fake_db.rows("knowledge_interviews", org_id=org["id"])[0]
    assert len(stored["messages"]) == 1


@pytest.mark.asyncio
async def test_completed_interview_loads_without_ai(fake_db, fake_ai, org):
    fake_db.seed(
        "knowledge_interviews",
        org_id=org["id"],
        status="complete",
        messages=[{"role": "assistant", "content": json.dumps(DONE)}],
        answers=DONE["profile"],
    )

    view = await knowledge_interview.load_interview(org["id"])

    assert fake_ai.calls == []
    assert view.last_question == "Thanks, that's everything."


@pytest.mark.asyncio
async def test_restart_resets_and_asks_again(fake_db, fake_ai, org):
    fake_db.seed(
        "knowledge_interviews",
        org_id=org["id"],
        status="complete",
        messages=[{"role": "assistant", "content": json.dumps(DONE)}],
        answers=DONE["profile"],
    )
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)

    view = await knowledge_interview.restart_interview(org["id"])

    assert view.interview.status == InterviewStatus.IN_PROGRESS
    assert view.interview.answers is None
    assert len(view.interview.messages) == 1
    assert view.progress.current == 1


@pytest.mark.asyncio
async def test_blank_answer_is_rejected(fake_db, fake_ai, org):
    fake_ai.respond(AIAction.KNOWLEDGE_INTERVIEW, FIRST)
    await knowledge_interview.load_interview(org["id"])

    with pytest.raises(KnowledgeInputError):
        await knowledge_interview.send_message(org["id"], "   ")

    assert fake_ai.count(AIAction.KNOWLEDGE_INTERVIEW) == 1
    assert len(fake_db.rows("knowledge_interviews", org_id=org["id"])[0]["messages"]) == 1


@pytest.mark.asyncio
async def test_completed_interview_takes_no_more_answers(fake_db, fake_ai, org):
    fake_db.seed(
        "knowledge_interviews",
        org_id=org["id"],
        status="complete",
        messages=[{"role": "assistant", "content": json.dumps(DONE)}],
        answers=DONE["profile"],
    )

    with pytest.raises(KnowledgeInputError):
        await knowledge_interview.send_message(org["id"], "One more thing")

    assert fake_ai.calls == []


def test_plain_text_assistant_turn_has_no_progress():
    from app.core.schemas_knowledge import ChatMessage, KnowledgeInterview

    interview = KnowledgeInterview(
        id="i1", org_id="o1", messages=[ChatMessage(role="assistant", content="Hello there")]
    )
    view = knowledge_interview.build_view(interview)
    assert view.last_question == "Hello there"
    assert view.progress is None


def test_blank_answer_endpoint_is_422(fake_db, fake_ai, owner):
    from fastapi.testclient import TestClient

    from app.main import app

    fake_db.seed("knowledge_interviews", org_id=owner["org_id"], status="in_progress", messages=[])
    client = TestClient(app)

    response = client.post(
        "/v1/knowledge/interview/messages",
        json={"content": "  "},
        headers={"Authorization": f"Bearer {owner['token']}"},
    )
    assert response.status_code == 422
    assert fake_ai.calls == []
