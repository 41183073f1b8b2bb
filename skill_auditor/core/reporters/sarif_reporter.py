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
SARIF format reporter for GitHub Code Scanning integration.

Implements SARIF 2.1.0 specification for audit results.
https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html

Only surfaced findings become results. No invocation timestamps are written,
keeping the output byte-identical across runs over the same input.
"""

import json
from typing import Any

from ...config.constants import SkillAuditorConstants
from ..models import AuditReport, CollectionReport, Finding, Severity
from ..rule_catalog import RuleCatalog


class SARIFReporter:
    """Generates SARIF 2.1.0 format reports."""

    SARIF_VERSION = "2.1.0"
    SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    SEVERITY_TO_LEVEL = {
        Severity.ERROR: "error",
        Severity.WARNING: "warning",
        Severity.INFO: "note",
    }

    def __init__(
        self,
        tool_name: str = SkillAuditorConstants.TOOL_NAME,
        tool_version: str = SkillAuditorConstants.VERSION,
        catalog: RuleCatalog | None = None,
    ):
        """
        Initialize SARIF reporter.

        Args:
            tool_name: Name of the auditing tool
            tool_version: Version of the auditing tool
            catalog: Rule catalog used for rule descriptions; findings supply
                them when None or when the rule is delegated to a tool
        """
        self.tool_name = tool_name
        self.tool_version = tool_version
        self.catalog = catalog

    def generate_report(self, data: AuditReport | CollectionReport) -> str:
        """
        Generate SARIF report.

        Args:
            data: AuditReport or CollectionReport object

        Returns:
            SARIF JSON string
        """
        if isinstance(data, CollectionReport):
            located = []
            for report in data.reports:
                prefix = report.skill_name
                located.extend((f, f"{prefix}/{f.file}" if f.file else prefix) for f in report.findings)
        else:
            located = [(f, f.file) for f in data.findings]

        sarif = self.build_sarif(located)
        return json.dumps(sarif, indent=2, ensure_ascii=False)

    def build_sarif(self, located: list[tuple[Finding, str | None]]) -> dict[str, Any]:
        """Build the SARIF document from ``(finding, artifact uri)`` pairs."""
        rules = self._extract_rules([f for f, _ in located])
        rule_index = {rule["id"]: i for i, rule in enumerate(rules)}
        results = [self._convert_finding(f, uri, rule_index[f.rule_id]) for f, uri in located]

        return {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": self._create_tool_component(rules),
                    "results": results,
                }
            ],
        }

    def _create_tool_component(self, rules: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "driver": {
                "name": self.tool_name,
                "version": self.tool_version,
                "rules": rules,
            }
        }

    def _extract_rules(self, findings: list[Finding]) -> list[dict[str, Any]]:
        """Unique rules referenced by *findings*, sorted by id."""
        by_id: dict[str, Finding] = {}
        for finding in findings:
            by_id.setdefault(finding.rule_id, finding)

        rules = []
        for rule_id in sorted(by_id):
            finding = by_id[rule_id]
            definition = self.catalog.lookup(rule_id) if self.catalog is not None else None
            if definition is not None and not definition.is_namespace and definition.matcher_kind != "external":
                description, remediation, severity = definition.description, definition.remediation, definition.severity
            else:
                description, remediation, severity = finding.message, finding.remediation, finding.severity

            rule: dict[str, Any] = {
                "id": rule_id,
                "shortDescription": {
                    "text": description,
                },
                "defaultConfiguration": {
                    "level": self.SEVERITY_TO_LEVEL[severity],
                },
                "properties": {
                    "category": finding.category,
                    "scanner": finding.scanner,
                },
            }
            if remediation:
                rule["help"] = {
                    "text": remediation,
                }
            rules.append(rule)
        return rules

    def _convert_finding(self, finding: Finding, uri: str | None, index: int) -> dict[str, Any]:
        result: dict[str, Any] = {
            "ruleId": finding.rule_id,
            "ruleIndex": index,
            "level": self.SEVERITY_TO_LEVEL[finding.severity],
            "message": {
                "text": finding.message,
            },
        }

        location: dict[str, Any] = {
            "physicalLocation": {
                "artifactLocation": {
                    "uri": uri or SkillAuditorConstants.MANIFEST_FILENAME,
                    "uriBaseId": "%SRCROOT%",
                },
            }
        }
        if finding.line:
            location["physicalLocation"]["region"] = {
                "startLine": finding.line,
            }
            if finding.snippet:
                location["physicalLocation"]["region"]["snippet"] = {
                    "text": finding.snippet,
                }
        result["locations"] = [location]
        return result

    def save_report(self, data: AuditReport | CollectionReport, output_path: str):
        """
        Save SARIF report to file.

        Args:
            data: AuditReport or CollectionReport object
            output_path: Path to save file
        """
        report_json = self.generate_report(data)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(report_json)
