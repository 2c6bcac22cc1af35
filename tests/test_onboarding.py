"""Tests for onboarding and business profile workflows."""

import pytest
from fastapi.testclient import TestClient

from app.core.errors import OnboardingConflictError, OnboardingValidationError
from app.core.schemas_orgs import GoverningBodyInput, OnboardingRequest, ProfileUpdateRequest
from app.main import app
from app.services.onboarding import (
    complete_onboarding,
    get_business_profile,
    update_business_profile,
    validate_business_form,
)


def _request(**overrides) -> OnboardingRequest:
    fields = {
        "name": "Rose City AFH",
        "industry_type": "Adult Foster Home",
        "state": "OR",
        "county": "Multnomah",
        "city": "Portland",
        "governing_bodies": [],
        "none_apply": True,
    }
    fields.update(overrides)
    return OnboardingRequest(**fields)


@pytest.fixture
def fresh_user(fake_db):
    fake_db.auth.add_token("token-fresh", "user-fresh", "fresh@example.com")
    fake_db.seed("users", id="user-fresh", email="fresh@example.com", role="owner", org_id=None)
    return {"user_id": "user-fresh", "token": "token-fresh"}


class TestValidation:
    def test_valid_form(self):
        assert validate_business_form(_request()) == []

    def test_other_industry_needs_label(self):
        problems = validate_business_form(_request(industry_type="Other", industry_custom_label=" "))
        assert problems == ["Describe your industry when choosing Other"]

    def test_missing_fields_reported(self):
        problems = validate_business_form(_request(name="", county="", city=""))
        assert len(problems) == 3


class TestCompleteOnboarding:
    @pytest.mark.asyncio
    async def test_creates_org_and_links_profile(self, fake_db, fresh_user):
        resolved = await complete_onboarding(
            fresh_user["user_id"], None, fresh_user["token"], _request()
        )

        orgs = fake_db.rows("orgs")
        assert len(orgs) == 1
        assert orgs[0]["industry_type"] == "Adult Foster Home"
        assert orgs[0]["created_by"] == fresh_user["user_id"]
        profile = fake_db.rows("users", id=fresh_user["user_id"])[0]
        assert profile["org_id"] == orgs[0]["id"]
        assert resolved.org_id == orgs[0]["id"]
        assert fake_db.count_calls("governing_bodies", "insert") == 0

    @pytest.mark.asyncio
    async def test_inserts_governing_bodies(self, fake_db, fresh_user):
        request = _request(
            none_apply=False,
            governing_bodies=[
                GoverningBodyInput(name="Oregon DHS", level="state", url="https://oregon.gov/dhs"),
                GoverningBodyInput(name="Multnomah County", level="county", url=""),
            ],
        )

        await complete_onboarding(fresh_user["user_id"], None, fresh_user["token"], request)

        bodies = fake_db.rows("governing_bodies")
        assert [b["name"] for b in bodies] == ["Oregon DHS", "Multnomah County"]
        assert bodies[1]["url"] is None

    @pytest.mark.asyncio
    async def test_requires_bodies_or_none_apply(self, fake_db, fresh_user):
        with pytest.raises(OnboardingValidationError):
            await complete_onboarding(
                fresh_user["user_id"], None, fresh_user["token"], _request(none_apply=False)
            )
        assert fake_db.rows("orgs") == []

    @pytest.mark.asyncio
    async def test_rejects_second_org(self, fake_db, owner):
        with pytest.raises(OnboardingConflictError):
            await complete_onboarding(owner["user_id"], owner["org_id"], owner["token"], _request())


class TestBusinessProfile:
    def test_get_profile(self, fake_db, org):
        profile = get_business_profile(org["id"])
        assert profile.org.name == "Sunrise Care Home"
        assert [gb.name for gb in profile.governing_bodies] == ["Oregon DHS"]

    def test_update_replaces_governing_bodies(self, fake_db, org):
        request = ProfileUpdateRequest(
            name="Sunrise Care Home II",
            industry_type="Adult Foster Care",
            state="OR",
            county="Multnomah",
            city="Gresham",
            governing_bodies=[GoverningBodyInput(name="City of Gresham", level="local")],
        )

        profile = update_business_profile(org["id"], request)

        assert profile.org.city == "Gresham"
        assert [gb.name for gb in profile.governing_bodies] == ["City of Gresham"]
        old = fake_db.rows("governing_bodies", name="Oregon DHS")[0]
        assert old["deleted_at"] is not None


class TestOnboardingEndpoint:
    def test_conflict_when_already_in_org(self, fake_db, owner):
        client = TestClient(app)
        response = client.post(
            "/v1/onboarding",
            json=_request().model_dump(),
            headers={"Authorization": f"Bearer {owner['token']}"},
        )
        assert response.status_code == 409

    def test_validation_error_is_422(self, fake_db, fresh_user):
        client = TestClient(app)
        response = client.post(
            "/v1/onboarding",
            json=_request(city="").model_dump(),
            headers={"Authorization": f"Bearer {fresh_user['token']}"},
        )
        assert response.status_code == 422
        assert "City is required" in response.json()["detail"]["message"]

    def test_requires_session(self, fake_db):
        client = TestClient(app)
        response = client.post("/v1/onboarding", json=_request().model_dump())
        assert response.status_code == 401
