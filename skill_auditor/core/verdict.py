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
Verdict calculation.

Findings are the auditor doing its job, so a failing verdict maps to exit
code 1; runtime and usage errors use exit code 2 and are raised instead.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..config.constants import SkillAuditorConstants
from .models import AuditReport, AuditStatus, CollectionReport, Finding, RiskLevel, Severity, Verdict

# Error findings from these rule families indicate code execution, backdoors
# or injected instructions.
CRITICAL_RULE_PREFIXES = ("bash/CAT-A", "bash/CAT-D", "prompt/")


def findings_verdict(findings: Iterable[Finding], strict: bool) -> Verdict:
    """Fail on any Error finding, or on any Warning finding in strict mode."""
    threshold = Severity.WARNING if strict else Severity.ERROR
    if any(f.severity >= threshold for f in findings):
        return Verdict.FAIL
    return Verdict.PASS


def verdict(report: AuditReport, strict: bool | None = None) -> Verdict:
    """Verdict for one skill; *strict* defaults to the mode the report was built with."""
    if report.error is not None:
        return Verdict.FAIL
    return findings_verdict(report.findings, report.strict if strict is None else strict)


def collection_verdict(report: CollectionReport, strict: bool | None = None) -> Verdict:
    if any(verdict(r, strict) == Verdict.FAIL for r in report.reports):
        return Verdict.FAIL
    return Verdict.PASS


def compute_status(findings: Iterable[Finding], strict: bool) -> AuditStatus:
    findings = list(findings)
    if findings_verdict(findings, strict) == Verdict.FAIL:
        return AuditStatus.FAILED
    if any(f.severity == Severity.WARNING for f in findings):
        return AuditStatus.WARNING
    return AuditStatus.PASSED


def compute_risk_level(findings: Iterable[Finding]) -> RiskLevel:
    findings = list(findings)
    errors = [f for f in findings if f.severity == Severity.ERROR]
    if any(f.rule_id.startswith(CRITICAL_RULE_PREFIXES) for f in errors):
        return RiskLevel.CRITICAL
    if errors:
        return RiskLevel.HIGH
    if any(f.severity == Severity.WARNING for f in findings):
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def exit_code(report: AuditReport | CollectionReport, strict: bool | None = None) -> int:
    if isinstance(report, CollectionReport):
        result = collection_verdict(report, strict)
    else:
        result = verdict(report, strict)
    return SkillAuditorConstants.EXIT_FAIL if result == Verdict.FAIL else SkillAuditorConstants.EXIT_PASS
