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
semgrep wrapper.

``semgrep scan`` fetches its rules over the network, so in sandboxed
environments it can hang. The run is capped at 30 seconds; at the deadline
the process is killed and the scanner reports Skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ...config.config import AuditConfig
from ...config.constants import SkillAuditorConstants
from ..models import RawMatch, ScanRun, Severity
from .base import ExternalToolScanner


def _error_summary(root: dict[str, Any]) -> str:
    errors = root.get("errors")
    if not isinstance(errors, list):
        return ""
    messages = [str(e.get("message") or e.get("type") or "") for e in errors if isinstance(e, dict)]
    return "; ".join(m for m in messages if m)


def semgrep_severity(value: str | None) -> Severity:
    value = (value or "WARNING").upper()
    if value == "ERROR":
        return Severity.ERROR
    if value == "WARNING":
        return Severity.WARNING
    return Severity.INFO


class SemgrepScanner(ExternalToolScanner):
    name = "semgrep"
    description = "Static analysis via semgrep (external tool)"
    tool = "semgrep"
    timeout = SkillAuditorConstants.SEMGREP_TIMEOUT_SECONDS

    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        result = self.runner.run(
            [self.tool, "scan", "--json", "--quiet", str(skill_root)],
            timeout=self.timeout,
            timeout_reason=f"semgrep timed out after {self.timeout}s, likely blocked by network restrictions",
        )
        if not result.stdout.strip():
            if result.returncode != 0:
                raise self.tool_failure(result.returncode, result.stderr)
            return ScanRun(self.name)

        try:
            root = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise self.tool_failure(result.returncode, result.stderr or str(e)) from e

        if not isinstance(root, dict):
            root = {}
        results = root.get("results")
        if not isinstance(results, list):
            results = []

        matches = [self._to_match(skill_root, item) for item in results if isinstance(item, dict)]
        if result.returncode != 0 and not matches:
            # semgrep exits 2 with an empty result list when it cannot load its rules
            raise self.tool_failure(result.returncode, result.stderr or _error_summary(root))

        total_files = (root.get("stats") or {}).get("total_files")
        return ScanRun(self.name, tuple(matches), files_scanned=total_files if isinstance(total_files, int) else 0)

    def _to_match(self, skill_root: Path, item: dict[str, Any]) -> RawMatch:
        extra = item.get("extra") or {}
        lines = extra.get("lines")
        fix = (extra.get("metadata") or {}).get("fix") or extra.get("fix")
        return RawMatch(
            rule_id=f"semgrep/{item.get('check_id') or 'unknown'}",
            file=self.normalize_tool_path(skill_root, item.get("path")),
            line=(item.get("start") or {}).get("line"),
            snippet=lines.strip() if isinstance(lines, str) else None,
            severity=semgrep_severity(extra.get("severity")),
            message=extra.get("message") or "semgrep finding",
            remediation=fix if isinstance(fix, str) else None,
        )
