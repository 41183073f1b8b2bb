# Copyright 2026 Cisco Systems, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""
Data models for findings, scanner outcomes and audit reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Finding severity, totally ordered INFO < WARNING < ERROR."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def from_string(cls, value: str) -> Severity:
        """Parse a severity name case-insensitively.

        Raises:
            ValueError: If *value* is not a known severity.
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown severity '{value}' (expected info, warning or error)") from None

    # str comparisons would order alphabetically, so compare by rank instead.
    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class Verdict(str, Enum):
    PASS = "pass"
    FAIL = "fail"


class AuditStatus(str, Enum):
    """Three-way status shown to users; ``WARNING`` still passes."""

    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ScanStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RawMatch:
    """A scanner hit before catalog enrichment.

    ``severity``, ``message`` and ``remediation`` override the catalog
    entry. The external-tool wrappers set them from tool output; read errors
    set ``message`` to name the failure.
    """

    rule_id: str
    file: str | None
    line: int | None = None
    snippet: str | None = None
    severity: Severity | None = None
    message: str | None = None
    remediation: str | None = None


@dataclass(frozen=True)
class Finding:
    """A RawMatch enriched with its rule definition."""

    rule_id: str
    severity: Severity
    category: str
    message: str
    file: str | None
    line: int | None = None
    remediation: str = ""
    scanner: str = ""
    snippet: str | None = None

    def sort_key(self) -> tuple[str, int, str]:
        return (self.file or "", self.line or 0, self.rule_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert finding to dictionary."""
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "category": self.category,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "snippet": self.snippet,
            "remediation": self.remediation,
            "scanner": self.scanner,
        }


@dataclass(frozen=True)
class ScanOutcome:
    """How a scanner run ended: completed, skipped (with reason) or failed (with error)."""

    status: ScanStatus
    reason: str | None = None

    @classmethod
    def completed(cls) -> ScanOutcome:
        return cls(ScanStatus.COMPLETED)

    @classmethod
    def skipped(cls, reason: str) -> ScanOutcome:
        return cls(ScanStatus.SKIPPED, reason)

    @classmethod
    def failed(cls, error: str) -> ScanOutcome:
        return cls(ScanStatus.FAILED, error)


@dataclass(frozen=True)
class ScanRun:
    """Raw output of one scanner invocation."""

    scanner: str
    matches: tuple[RawMatch, ...] = ()
    outcome: ScanOutcome = field(default_factory=ScanOutcome.completed)
    files_scanned: int = 0


@dataclass(frozen=True)
class ScannerResult:
    """Per-scanner summary attached to an AuditReport."""

    scanner: str
    status: ScanStatus
    reason: str | None = None
    files_scanned: int = 0
    finding_count: int = 0
    suppressed_count: int = 0
    max_severity: Severity | None = None

    @property
    def is_skipped(self) -> bool:
        return self.status == ScanStatus.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanner": self.scanner,
            "status": self.status.value,
            "reason": self.reason,
            "files_scanned": self.files_scanned,
            "findings": self.finding_count,
            "suppressed": self.suppressed_count,
        }


@dataclass(frozen=True)
class SuppressedFinding:
    """Audit-trail entry for a finding dropped by a suppression."""

    rule_id: str
    severity: Severity
    message: str
    file: str | None
    line: int | None
    source: str
    """``inline`` or ``file``."""
    reason: str
    ticket: str | None = None

    def sort_key(self) -> tuple[str, int, str]:
        return (self.file or "", self.line or 0, self.rule_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "message": self.message,
            "file": self.file,
            "line": self.line,
            "source": self.source,
            "reason": self.reason,
            "ticket": self.ticket,
        }


@dataclass(frozen=True)
class AuditReport:
    """Result of auditing one skill directory."""

    skill_name: str
    skill_path: str
    scanner_results: tuple[ScannerResult, ...] = ()
    findings: tuple[Finding, ...] = ()
    suppressed: tuple[SuppressedFinding, ...] = ()
    status: AuditStatus = AuditStatus.PASSED
    risk_level: RiskLevel = RiskLevel.LOW
    strict: bool = False
    error: str | None = None
    """Set when the audit of this skill aborted; the report then counts as failed."""

    @property
    def passed(self) -> bool:
        return self.error is None and self.status != AuditStatus.FAILED

    @property
    def files_scanned(self) -> int:
        return sum(r.files_scanned for r in self.scanner_results)

    @property
    def skipped_scanners(self) -> list[tuple[str, str]]:
        return [(r.scanner, r.reason or "skipped") for r in self.scanner_results if r.is_skipped]

    def count_by_severity(self) -> tuple[int, int, int]:
        """Return ``(errors, warnings, info)`` over surfaced findings."""
        errors = warnings = info = 0
        for finding in self.findings:
            if finding.severity == Severity.ERROR:
                errors += 1
            elif finding.severity == Severity.WARNING:
                warnings += 1
            else:
                info += 1
        return errors, warnings, info

    def get_findings_by_severity(self, severity: Severity) -> list[Finding]:
        return [f for f in self.findings if f.severity == severity]

    def summary(self) -> dict[str, int]:
        errors, warnings, info = self.count_by_severity()
        return {"errors": errors, "warnings": warnings, "info": info, "suppressed": len(self.suppressed)}

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        data: dict[str, Any] = {
            "skill": self.skill_name,
            "path": self.skill_path,
            "status": self.status.value,
            "risk_level": self.risk_level.value,
            "passed": self.passed,
            "strict": self.strict,
            "summary": self.summary(),
            "scanners": [r.to_dict() for r in self.scanner_results],
            "findings": [f.to_dict() for f in self.findings],
            "suppressed": [s.to_dict() for s in self.suppressed],
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class CollectionReport:
    """Reports for every skill found under a collection directory, ordered by name."""

    root: str
    reports: tuple[AuditReport, ...] = ()
    strict: bool = False

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.reports)

    @property
    def total_skills(self) -> int:
        return len(self.reports)

    def get(self, skill_name: str) -> AuditReport | None:
        for report in self.reports:
            if report.skill_name == skill_name:
                return report
        return None

    def status_counts(self) -> dict[str, int]:
        counts = {"passed": 0, "warnings": 0, "failed": 0}
        for report in self.reports:
            if not report.passed:
                counts["failed"] += 1
            elif report.status == AuditStatus.WARNING:
                counts["warnings"] += 1
            else:
                counts["passed"] += 1
        return counts

    def skill_summaries(self) -> list[dict[str, Any]]:
        """Per-skill summary rows in report order."""
        rows = []
        for report in self.reports:
            row: dict[str, Any] = {
                "skill": report.skill_name,
                "status": report.status.value,
                "passed": report.passed,
                **report.summary(),
            }
            if report.error is not None:
                row["error"] = report.error
            rows.append(row)
        return rows

    def to_dict(self) -> dict[str, Any]:
        return {
            "collection": self.root,
            "passed": self.passed,
            "strict": self.strict,
            "summary": {"skills": self.total_skills, **self.status_counts()},
            "skills": [r.to_dict() for r in self.reports],
        }
