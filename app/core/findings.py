"""In-memory compliance finding state.

Finding status (pending / resolved / skipped) lives only for the lifetime of
a FindingSet; it is never written to the data store. The compliance step
returns every finding as pending and builds its summary here. resolve() and
skip() are the client-side review actions; no endpoint records them, so a
client holding the findings applies them locally.
"""

from app.core.errors import NotFoundError
from app.core.schemas_ai import RawFinding
from app.core.schemas_sops import (
    ComplianceFinding,
    FindingStatus,
    FindingSummary,
    Severity,
)


class FindingSet:
    def __init__(self, findings: list[ComplianceFinding]):
        self._findings = {f.finding_id: f for f in findings}

    @classmethod
    def from_raw(cls, raw: list[RawFinding]) -> "FindingSet":
        return cls([ComplianceFinding(**f.model_dump(), status=FindingStatus.PENDING) for f in raw])

    @property
    def findings(self) -> list[ComplianceFinding]:
        return list(self._findings.values())

    def _set_status(self, finding_id: int, status: FindingStatus) -> ComplianceFinding:
        finding = self._findings.get(finding_id)
        if finding is None:
            raise NotFoundError(f"Finding {finding_id} not found")
        updated = finding.model_copy(update={"status": status})
        self._findings[finding_id] = updated
        return updated

    def resolve(self, finding_id: int) -> ComplianceFinding:
        return self._set_status(finding_id, FindingStatus.RESOLVED)

    def skip(self, finding_id: int) -> ComplianceFinding:
        return self._set_status(finding_id, FindingStatus.SKIPPED)

    def summary(self) -> FindingSummary:
        findings = self.findings
        return FindingSummary(
            high=sum(1 for f in findings if f.severity == Severity.HIGH),
            medium=sum(1 for f in findings if f.severity == Severity.MEDIUM),
            low=sum(1 for f in findings if f.severity == Severity.LOW),
            resolved=sum(1 for f in findings if f.status == FindingStatus.RESOLVED),
            skipped=sum(1 for f in findings if f.status == FindingStatus.SKIPPED),
            total=len(findings),
        )
