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
Plain-text terminal reporter.
"""

from ..models import AuditReport, CollectionReport, ScannerResult, ScanStatus, Severity

RULE = "=" * 60

_SEVERITY_TAGS = {Severity.ERROR: "ERROR", Severity.WARNING: " WARN", Severity.INFO: " INFO"}


class PrettyReporter:
    """Human-readable summary grouped by scanner, ending in a result banner."""

    def generate_report(self, data: AuditReport | CollectionReport) -> str:
        if isinstance(data, CollectionReport):
            return self._collection(data)
        return self._skill(data)

    def _scanner_row(self, result: ScannerResult) -> str:
        if result.status == ScanStatus.SKIPPED:
            return f"  [SKIP] {result.scanner:<20} {result.reason or 'skipped'}"
        if result.status == ScanStatus.FAILED:
            return f"  [FAIL] {result.scanner:<20} scanner failed: {result.reason}"
        if result.max_severity == Severity.ERROR:
            tag = "FAIL"
        elif result.max_severity == Severity.WARNING:
            tag = "WARN"
        else:
            tag = "PASS"
        return f"  [{tag}] {result.scanner:<20} {result.finding_count} findings, {result.files_scanned} files scanned"

    def _skill(self, report: AuditReport) -> str:
        lines = [
            RULE,
            f"Skill Audit: {report.skill_name}",
            f"Path: {report.skill_path}",
            RULE,
        ]
        if report.error is not None:
            lines.extend(["", f"Audit failed: {report.error}", "", "Result: FAILED"])
            return "\n".join(lines)

        lines.append("Scanners:")
        lines.extend(self._scanner_row(r) for r in report.scanner_results)
        lines.append("")

        if report.findings:
            lines.append("Findings:")
            for finding in report.findings:
                lines.append(f"  [{_SEVERITY_TAGS[finding.severity]}] {finding.rule_id:<25} {finding.message}")
                if finding.file:
                    location = f"{finding.file}:{finding.line}" if finding.line else finding.file
                    lines.append(f"         {location}")
                if finding.snippet:
                    lines.append(f"         > {finding.snippet}")
                if finding.remediation:
                    lines.append(f"         Fix: {finding.remediation}")
            lines.append("")

        if report.suppressed:
            lines.append(f"Suppressed ({len(report.suppressed)}):")
            for entry in report.suppressed:
                location = entry.file or ""
                if entry.line:
                    location = f"{location}:{entry.line}"
                ticket = f" [{entry.ticket}]" if entry.ticket else ""
                lines.append(f"  [SKIP] {entry.rule_id:<25} {location}  {entry.reason}{ticket}")
            lines.append("")

        errors, warnings, info = report.count_by_severity()
        strict = " (strict)" if report.strict else ""
        lines.append(
            f"Result: {report.status.value.upper()}{strict}  |  risk {report.risk_level.value}  |  "
            f"{errors} errors, {warnings} warnings, {info} info, {len(report.suppressed)} suppressed"
        )
        return "\n".join(lines)

    def _collection(self, collection: CollectionReport) -> str:
        sections = [self._skill(report) for report in collection.reports]
        counts = collection.status_counts()
        lines = [
            RULE,
            f"Skill Collection Audit: {collection.root}",
            RULE,
            f"Skills Audited: {collection.total_skills}",
            f"Passed: {counts['passed']}  Warnings: {counts['warnings']}  Failed: {counts['failed']}",
            "",
            f"  {'Skill':<30} {'Status':<8} {'Errors':>6} {'Warnings':>8} {'Info':>5} {'Suppressed':>10}",
        ]
        for row in collection.skill_summaries():
            status = "error" if "error" in row else row["status"]
            lines.append(
                f"  {row['skill']:<30} {status:<8} {row['errors']:>6} {row['warnings']:>8} "
                f"{row['info']:>5} {row['suppressed']:>10}"
            )
        lines.append("")
        lines.append(f"Result: {'PASSED' if collection.passed else 'FAILED'}")
        return "\n\n".join(sections + ["\n".join(lines)])
