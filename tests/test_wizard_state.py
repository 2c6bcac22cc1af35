"""Tests for wizard step navigation, single-flight and compliance findings."""

import asyncio

import pytest

from app.core.errors import NotFoundError
from app.core.findings import FindingSet
from app.core.schemas_ai import RawFinding
from app.core.schemas_sops import FindingStatus
from app.core.single_flight import SingleFlight
from app.core.wizard import WizardStep, current_step, next_step, previous_step, stepper


class TestWizardSteps:
    def test_current_step_from_path(self):
        assert current_step("/sops/abc/build/draft") == WizardStep.DRAFT
        assert current_step("/sops/abc/build/compliance/") == WizardStep.COMPLIANCE
        assert current_step("/sops/abc") is None

    def test_neighbours(self):
        assert next_step(WizardStep.CONTEXT) == WizardStep.VOICE
        assert next_step(WizardStep.COMPLIANCE) is None
        assert previous_step(WizardStep.CONTEXT) is None
        assert previous_step(WizardStep.DRAFT) == WizardStep.TRANSCRIPT

    def test_stepper_marks_progress(self):
        entries = stepper("abc", "/sops/abc/build/draft")
        assert [e.state for e in entries] == ["completed", "completed", "completed", "current", "upcoming"]
        assert entries[0].path == "/sops/abc/build/context"

    def test_stepper_outside_wizard(self):
        assert {e.state for e in stepper("abc", "/sops/abc")} == {"upcoming"}


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_call(self):
        flights = SingleFlight()
        calls = []

        async def work():
            calls.append(1)
            await asyncio.sleep(0)
            return "done"

        results = await asyncio.gather(flights.run("k", work), flights.run("k", work))

        assert results == ["done", "done"]
        assert len(calls) == 1
        assert not flights.in_flight("k")

    @pytest.mark.asyncio
    async def test_failure_releases_key(self):
        flights = SingleFlight()

        async def boom():
            raise RuntimeError("failed")

        with pytest.raises(RuntimeError):
            await flights.run("k", boom)

        assert await flights.run("k", lambda: asyncio.sleep(0, result="retried")) == "retried"

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self):
        flights = SingleFlight()
        calls = []

        async def work():
            calls.append(1)

        await asyncio.gather(flights.run("a", work), flights.run("b", work))
        assert len(calls) == 2


class TestFindings:
    def _set(self):
        return FindingSet.from_raw(
            [
                RawFinding(finding_id=1, severity="high", title="No allergy check"),
                RawFinding(finding_id=2, severity="medium", title="Unclear owner"),
                RawFinding(finding_id=3, severity="medium", title="No sign-off"),
            ]
        )

    def test_summary(self):
        summary = self._set().summary()
        assert (summary.high, summary.medium, summary.low, summary.total) == (1, 2, 0, 3)

    def test_resolve_and_skip(self):
        findings = self._set()
        findings.resolve(1)
        findings.skip(2)

        summary = findings.summary()
        assert summary.resolved == 1
        assert summary.skipped == 1
        assert findings.findings[2].status == FindingStatus.PENDING

    def test_unknown_finding(self):
        with pytest.raises(NotFoundError):
            self._set().resolve(99)
