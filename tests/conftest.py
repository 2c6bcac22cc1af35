"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Any

import pytest

# app.main reads settings at import time, before any fixture runs
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("EZSOP_ENV", "test")

from app.core.schemas_ai import AIProxyResponse  # noqa: E402
from tests.fakes.fake_supabase import FakeSupabase  # noqa: E402

SUPABASE_MODULES = [
    "app.db.users",
    "app.db.orgs",
    "app.db.governing_bodies",
    "app.db.sops",
    "app.db.sop_steps",
    "app.db.sop_recommendations",
    "app.db.knowledge_items",
    "app.db.knowledge_base",
    "app.db.knowledge_interviews",
    "app.db.readiness_items",
    "app.db.wizard_drafts",
    "app.core.session_resolver",
    "app.api.auth",
]


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
    os.environ["EZSOP_ENV"] = "test"


@pytest.fixture
def fake_db(monkeypatch):
    """Route every data-layer call to one in-memory store."""
    db = FakeSupabase()
    for module in SUPABASE_MODULES:
        monkeypatch.setattr(f"{module}.get_supabase", lambda: db)
    return db


class FakeAIProxy:
    """AI proxy returning canned data per action and recording every call."""

    def __init__(self):
        self.responses: dict[str, Any] = {}
        self.calls: list[tuple[str, dict]] = []

    def respond(self, action, data=None, error=None):
        self.responses[getattr(action, "value", action)] = (data, error)

    def count(self, action) -> int:
        name = getattr(action, "value", action)
        return sum(1 for a, _ in self.calls if a == name)

    async def invoke(self, action: str, payload: dict) -> AIProxyResponse:
        self.calls.append((action, payload))
        # Let concurrent callers reach the single-flight guard first
        await asyncio.sleep(0)
        data, error = self.responses.get(action, (None, "No canned response"))
        if isinstance(error, Exception):
            raise error
        if error:
            return AIProxyResponse(success=False, error=error)
        return AIProxyResponse(success=True, data=data)


@pytest.fixture
def fake_ai(monkeypatch):
    proxy = FakeAIProxy()
    monkeypatch.setattr("app.core.ai_client.get_ai_proxy", lambda token=None: proxy)
    return proxy


@pytest.fixture
def org(fake_db):
    """An onboarded organization whose knowledge base is built."""
    org_row = fake_db.seed(
        "orgs",
        name="Sunrise Care Home",
        industry_type="Adult Foster Care",
        state="OR",
        county="Multnomah",
        city="Portland",
        manager_name="Dana",
    )
    fake_db.seed(
        "governing_bodies",
        org_id=org_row["id"],
        name="Oregon DHS",
        level="state",
        url=None,
    )
    fake_db.seed(
        "knowledge_base",
        org_id=org_row["id"],
        summary="Small adult foster home licensed by Oregon DHS.",
        learned_topics=["licensing"],
        source_count=2,
        status="complete",
    )
    return org_row


@pytest.fixture
def owner(fake_db, org):
    """Auth token + profile for a user in ``org``."""
    user_id = "user-owner-1"
    fake_db.seed("users", id=user_id, email="owner@example.com", role="owner", org_id=org["id"])
    fake_db.auth.add_token("token-owner", user_id, "owner@example.com")
    return {"user_id": user_id, "token": "token-owner", "org_id": org["id"]}