"""Tests for the knowledge checklist, status transitions and knowledge base build."""

import asyncio
import itertools

import pytest
from fastapi.testclient import TestClient

from app.core.errors import (
    BuildGateError,
    KnowledgeInputError,
    KnowledgeStatusTransitionError,
    NotFoundError,
)
from app.core.knowledge_status import can_transition, is_handled
from app.core.schemas_ai import AIAction
from app.core.schemas_knowledge import KnowledgeItemCreate, KnowledgeItemStatus, KnowledgeSourceCreate
from app.main import app
from app.services import knowledge_checklist

STATUSES = [s.value for s in KnowledgeItemStatus]
LEGAL_EDGES = {
    ("pending", "provided"),
    ("pending", "skipped"),
    ("provided", "pending"),
    ("skipped", "pending"),
    ("learned", "pending"),
}

CHECKLIST = {
    "items": [
        {"title": "OAR 411-050", "type": "LINK", "priority": "REQUIRED", "level": "state",
         "suggested_source": "https://secure.sos.state.or.us/oard/displayDivisionRules.action?selectedDivision=2698"},
        {"title": "House rules", "type": "DOCUMENT", "priority": "RECOMMENDED"},
        {"title": "Walkthrough recording", "type": "VOICE", "priority": "OPTIONAL"},
    ]
}


@pytest.fixture
def bare_org(fake_db):
    """An onboarded org that has not built its knowledge base yet."""
    return fake_db.seed(
        "orgs", name="Maple AFH", industry_type="Adult Foster Home", state="OR", county="Lane", city="Eugene"
    )


def _item(fake_db, org_id, **fields):
    row = {
        "org_id": org_id,
        "title": "Item",
        "description": "",
        "type": "DOCUMENT",
        "priority": "RECOMMENDED",
        "level": "internal",
        "status": "pending",
        "sort_order": 1,
    }
    row.update(fields)
    return fake_db.seed("knowledge_items", **row)


class TestTransitionGraph:
    @pytest.mark.parametrize("current,target", list(itertools.product(STATUSES, STATUSES)))
    def test_every_edge(self, current, target):
        assert can_transition(current, target) == ((current, target) in LEGAL_EDGES)

    def test_unknown_status_is_illegal(self):
        assert can_transition("archived", "pending") is False

    def test_handled_statuses(self):
        assert [s for s in STATUSES if is_handled(s)] == ["provided", "learned", "skipped"]


class TestItemActions:
    def test_use_suggested_source_is_one_update(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], type="LINK", suggested_source="https://oregon.gov/dhs")

        updated = knowledge_checklist.use_suggested_source(bare_org["id"], item["id"])

        assert updated.status == KnowledgeItemStatus.PROVIDED
        assert updated.provided_url == "https://oregon.gov/dhs"
        assert fake_db.count_calls("knowledge_items", "update") == 1

    def test_reopen_clears_provided_values(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], type="LINK", status="provided", provided_url="https://x.gov")

        reopened = knowledge_checklist.reopen_item(bare_org["id"], item["id"])

        assert reopened.status == KnowledgeItemStatus.PENDING
        assert reopened.provided_url is None

    def test_learned_item_can_be_reopened(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], status="learned")
        assert knowledge_checklist.reopen_item(bare_org["id"], item["id"]).status == KnowledgeItemStatus.PENDING

    @pytest.mark.parametrize("status", ["provided", "skipped", "learned"])
    def test_handled_item_cannot_be_skipped_or_provided(self, fake_db, bare_org, status):
        item = _item(fake_db, bare_org["id"], type="DOCUMENT", status=status)

        with pytest.raises(KnowledgeStatusTransitionError):
            knowledge_checklist.skip_item(bare_org["id"], item["id"])
        with pytest.raises(KnowledgeStatusTransitionError):
            knowledge_checklist.provide_text(bare_org["id"], item["id"], "Our house rules")
        assert fake_db.count_calls("knowledge_items", "update") == 0

    def test_pending_item_cannot_be_reopened(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"])
        with pytest.raises(KnowledgeStatusTransitionError):
            knowledge_checklist.reopen_item(bare_org["id"], item["id"])

    def test_input_must_match_item_type(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], type="PDF")

        with pytest.raises(KnowledgeInputError):
            knowledge_checklist.provide_url(bare_org["id"], item["id"], "https://x.gov")

        provided = knowledge_checklist.provide_file(bare_org["id"], item["id"], "license.pdf")
        assert provided.provided_file == "license.pdf"

    def test_blank_value_rejected(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], type="VOICE")
        with pytest.raises(KnowledgeInputError):
            knowledge_checklist.provide_transcript(bare_org["id"], item["id"], "   ")

    def test_add_item_goes_last(self, fake_db, bare_org):
        _item(fake_db, bare_org["id"], sort_order=4)

        added = knowledge_checklist.add_item(bare_org["id"], KnowledgeItemCreate(title="Fire plan"))

        assert added.sort_order == 5
        assert added.status == KnowledgeItemStatus.PENDING

    @pytest.mark.parametrize(
        "item_type,field",
        [
            ("LINK", "provided_url"),
            ("PDF", "provided_file"),
            ("DOCUMENT", "provided_text"),
            ("VOICE", "provided_transcript"),
        ],
    )
    def test_add_source_arrives_provided(self, fake_db, bare_org, item_type, field):
        _item(fake_db, bare_org["id"], sort_order=2)

        added = knowledge_checklist.add_source(
            bare_org["id"],
            KnowledgeSourceCreate(title=" Staff handbook ", type=item_type, level="internal", content=" body "),
        )

        assert added.status == KnowledgeItemStatus.PROVIDED
        assert added.title == "Staff handbook"
        assert getattr(added, field) == "body"
        assert added.sort_order == 3
        assert fake_db.count_calls("knowledge_items", "insert") == 1

    def test_add_source_requires_content(self, fake_db, bare_org):
        with pytest.raises(KnowledgeInputError):
            knowledge_checklist.add_source(
                bare_org["id"], KnowledgeSourceCreate(title="Policy", type="LINK", content="  ")
            )
        assert fake_db.rows("knowledge_items") == []

    def test_added_source_counts_toward_build(self, fake_db, bare_org):
        knowledge_checklist.add_source(
            bare_org["id"], KnowledgeSourceCreate(title="Rules", type="DOCUMENT", content="No smoking.")
        )
        gate = knowledge_checklist.get_build_gate(bare_org["id"])
        assert gate.source_count == 1

    def test_delete_is_soft_and_hides_item(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"], priority="REQUIRED")

        knowledge_checklist.delete_item(bare_org["id"], item["id"])

        stored = fake_db.rows("knowledge_items", id=item["id"])[0]
        assert stored["deleted_at"] is not None
        assert knowledge_checklist.list_checklist(bare_org["id"]).total == 0
        # A deleted required item no longer blocks the build
        assert knowledge_checklist.get_build_gate(bare_org["id"]).can_build is True

    def test_delete_twice_is_not_found(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"])
        knowledge_checklist.delete_item(bare_org["id"], item["id"])
        with pytest.raises(NotFoundError):
            knowledge_checklist.delete_item(bare_org["id"], item["id"])

    def test_delete_from_another_org_is_not_found(self, fake_db, bare_org):
        item = _item(fake_db, bare_org["id"])
        with pytest.raises(NotFoundError):
            knowledge_checklist.delete_item("another-org", item["id"])
        assert fake_db.rows("knowledge_items", id=item["id"])[0]["deleted_at"] is None



class TestChecklistGeneration:
    @pytest.mark.asyncio
    async def test_generates_once(self, fake_db, fake_ai, bare_org):
        fake_ai.respond(AIAction.GENERATE_KNOWLEDGE_CHECKLIST, CHECKLIST)

        groups = await knowledge_checklist.generate_checklist(bare_org["id"])
        again = await knowledge_checklist.generate_checklist(bare_org["id"])

        assert fake_ai.count(AIAction.GENERATE_KNOWLEDGE_CHECKLIST) == 1
        assert [i.title for i in groups.REQUIRED] == ["OAR 411-050"]
        assert groups.total == 3
        assert again.total == 3
        assert [row["sort_order"] for row in fake_db.rows("knowledge_items")] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_uses_completed_interview_profile(self, fake_db, fake_ai, bare_org):
        fake_db.seed(
            "knowledge_interviews",
            org_id=bare_org["id"],
            status="complete",
            messages=[],
            answers={"services": ["personal care"]},
        )
        fake_ai.respond(AIAction.GENERATE_KNOWLEDGE_CHECKLIST, CHECKLIST)

        await knowledge_checklist.generate_checklist(bare_org["id"])

        _, payload = fake_ai.calls[0]
        assert payload["profile"] == {"services": ["personal care"]}
        assert payload["county"] == "Lane"


class TestKnowledgeBaseBuild:
    def test_gate_blocks_on_pending_required(self, fake_db, bare_org):
        _item(fake_db, bare_org["id"], title="License", priority="REQUIRED")
        gate = knowledge_checklist.get_build_gate(bare_org["id"])
        assert gate.can_build is False
        assert gate.pending_required == ["License"]

    @pytest.mark.asyncio
    async def test_build_refused_while_required_pending(self, fake_db, fake_ai, bare_org):
        _item(fake_db, bare_org["id"], priority="REQUIRED")
        with pytest.raises(BuildGateError):
            await knowledge_checklist.build_knowledge_base(bare_org["id"])

    @pytest.mark.asyncio
    async def test_build_refused_without_sources(self, fake_db, fake_ai, bare_org):
        _item(fake_db, bare_org["id"], priority="REQUIRED", status="skipped")
        with pytest.raises(BuildGateError):
            await knowledge_checklist.build_knowledge_base(bare_org["id"])
        assert fake_ai.calls == []

    @pytest.mark.asyncio
    async def test_concurrent_builds_leave_one_row(self, fake_db, fake_ai, bare_org):
        _item(fake_db, bare_org["id"], status="provided", provided_text="We serve 5 residents.")
        fake_ai.respond(AIAction.INGEST_KNOWLEDGE, {"summary": "Five-bed home.", "learned_topics": ["capacity"]})

        await asyncio.gather(
            knowledge_checklist.build_knowledge_base(bare_org["id"]),
            knowledge_checklist.build_knowledge_base(bare_org["id"]),
        )
        kb = await knowledge_checklist.build_knowledge_base(bare_org["id"])

        assert len(fake_db.rows("knowledge_base", org_id=bare_org["id"])) == 1
        assert kb.summary == "Five-bed home."
        assert kb.source_count == 1
        assert fake_ai.count(AIAction.INGEST_KNOWLEDGE) == 2

    @pytest.mark.asyncio
    async def test_payload_lists_provided_content(self, fake_db, fake_ai, bare_org):
        _item(fake_db, bare_org["id"], title="Rules", status="provided", provided_text="No smoking.")
        _item(fake_db, bare_org["id"], title="Skipped", status="skipped")
        fake_ai.respond(AIAction.INGEST_KNOWLEDGE, {"summary": "s"})

        await knowledge_checklist.build_knowledge_base(bare_org["id"])

        _, payload = fake_ai.calls[0]
        assert [i["title"] for i in payload["items"]] == ["Rules"]
        assert payload["items"][0]["provided_text"] == "No smoking."


class TestKnowledgeEndpoints:
    def _user(self, fake_db, org_id):
        fake_db.seed("users", id="user-k", email="k@example.com", role="owner", org_id=org_id)
        fake_db.auth.add_token("token-k", "user-k", "k@example.com")
        return {"Authorization": "Bearer token-k"}

    def test_knowledge_routes_open_before_knowledge_base(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        client = TestClient(app)

        assert client.get("/v1/knowledge/items", headers=headers).status_code == 200
        # SOP routes still wait for the knowledge base
        response = client.get("/v1/sops", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"]["redirect_to"] == "/knowledge"

    def test_wrong_type_is_422(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        item = _item(fake_db, bare_org["id"], type="PDF")
        client = TestClient(app)

        response = client.post(
            f"/v1/knowledge/items/{item['id']}/url", json={"url": "https://x.gov"}, headers=headers
        )
        assert response.status_code == 422

    def test_illegal_transition_is_409(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        item = _item(fake_db, bare_org["id"], status="skipped")
        client = TestClient(app)

        response = client.post(f"/v1/knowledge/items/{item['id']}/skip", headers=headers)
        assert response.status_code == 409

    def test_add_source_endpoint(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        client = TestClient(app)

        response = client.post(
            "/v1/knowledge/sources",
            json={"title": "County fire code", "type": "LINK", "level": "county", "content": "https://lanecounty.org/fire"},
            headers=headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "provided"
        assert body["provided_url"] == "https://lanecounty.org/fire"

    def test_add_source_blank_content_is_422(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        client = TestClient(app)

        response = client.post(
            "/v1/knowledge/sources", json={"title": "Notes", "type": "DOCUMENT", "content": " "}, headers=headers
        )
        assert response.status_code == 422

    def test_delete_item_endpoint(self, fake_db, bare_org):
        headers = self._user(fake_db, bare_org["id"])
        item = _item(fake_db, bare_org["id"])
        client = TestClient(app)

        assert client.delete(f"/v1/knowledge/items/{item['id']}", headers=headers).status_code == 204
        assert client.delete(f"/v1/knowledge/items/{item['id']}", headers=headers).status_code == 404
        assert client.get("/v1/knowledge/items", headers=headers).json()["total"] == 0
