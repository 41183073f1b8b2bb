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
gitleaks wrapper.

gitleaks writes its JSON report to a file, so the report goes to a temporary
directory that is removed after parsing. Exit code 1 means leaks were found;
anything higher is a tool failure.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from ...config.config import AuditConfig
from ..exceptions import ScannerError
from ..models import RawMatch, ScanRun, Severity
from .base import ExternalToolScanner


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


class SecretsScanner(ExternalToolScanner):
    name = "secrets"
    description = "Secret scanning via gitleaks (external tool)"
    tool = "gitleaks"

    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        files_scanned = sum(1 for p in skill_root.rglob("*") if p.is_file())

        with tempfile.TemporaryDirectory(prefix="skill-auditor-") as tmp:
            report_path = Path(tmp) / "gitleaks.json"
            result = self.runner.run(
                [
                    self.tool,
                    "detect",
                    "--source",
                    str(skill_root),
                    "--no-git",
                    "--report-format",
                    "json",
                    "--report-path",
                    str(report_path),
                ],
                timeout=self.timeout,
            )
            if result.returncode > 1:
                raise self.tool_failure(result.returncode, result.stderr)
            try:
                content = report_path.read_text(encoding="utf-8")
            except OSError as e:
                if result.returncode != 0:
                    raise self.tool_failure(result.returncode, result.stderr) from e
                content = ""

        if not content.strip():
            return ScanRun(self.name, files_scanned=files_scanned)
        try:
            items = json.loads(content)
        except json.JSONDecodeError as e:
            raise ScannerError(f"Failed to parse gitleaks report: {e}") from e

        matches = [self._to_match(skill_root, item) for item in items if isinstance(item, dict)]
        return ScanRun(self.name, tuple(matches), files_scanned=files_scanned)

    def _to_match(self, skill_root: Path, item: dict[str, Any]) -> RawMatch:
        rule = _first(item, "RuleID", "ruleId") or "unknown"
        match = _first(item, "Match", "match")
        return RawMatch(
            rule_id=f"secrets/{rule}",
            file=self.normalize_tool_path(skill_root, _first(item, "File", "file")),
            line=_first(item, "StartLine", "startLine"),
            snippet=str(match) if match is not None else None,
            severity=Severity.ERROR,
            message=_first(item, "Description", "description") or "Secret detected",
        )
