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
shellcheck wrapper.

Runs ``shellcheck -f json --severity=style`` once per ``.sh``/``.bash`` file
and maps each reported code to ``shellcheck/SC<code>``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ...config.config import AuditConfig
from ..models import RawMatch, ScanRun, Severity
from .base import ExternalToolScanner, collect_files, make_snippet, read_text, rel_path

logger = logging.getLogger(__name__)

_LEVELS = {"error": Severity.ERROR, "warning": Severity.WARNING}


def parse_shellcheck_output(
    items: list[dict[str, Any]], rel: str, source_lines: list[str] | None = None
) -> list[RawMatch]:
    """Convert shellcheck's JSON array for one file into RawMatches.

    The snippet is the offending source line, when *source_lines* has it.
    """
    source_lines = source_lines or []
    matches = []
    for item in items:
        code = item.get("code")
        if not isinstance(code, int) or code <= 0:
            continue
        line = item.get("line")
        snippet = None
        if isinstance(line, int) and 0 < line <= len(source_lines):
            snippet = make_snippet(source_lines[line - 1]) or None
        matches.append(
            RawMatch(
                rule_id=f"shellcheck/SC{code}",
                file=rel,
                line=line,
                snippet=snippet,
                severity=_LEVELS.get(item.get("level"), Severity.INFO),
                message=item.get("message") or "shellcheck finding",
                remediation=f"See https://www.shellcheck.net/wiki/SC{code}",
            )
        )
    return matches


def _source_lines(path: Path) -> list[str]:
    try:
        return read_text(path).splitlines()
    except (OSError, UnicodeDecodeError):
        return []


class ShellcheckScanner(ExternalToolScanner):
    name = "shellcheck"
    description = "Shell script linting via shellcheck (external tool)"
    tool = "shellcheck"

    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        files = collect_files(skill_root, ("sh", "bash"))
        matches: list[RawMatch] = []

        for path in files:
            rel = rel_path(skill_root, path)
            result = self.runner.run([self.tool, "-f", "json", "--severity=style", str(path)], timeout=self.timeout)
            # Exit 1 means issues were found; anything higher is a tool error.
            broken = result.returncode > 1
            if not result.stdout.strip():
                if broken:
                    raise self.tool_failure(result.returncode, result.stderr, rel)
                continue
            try:
                items = json.loads(result.stdout)
            except json.JSONDecodeError as e:
                if result.returncode != 0:
                    raise self.tool_failure(result.returncode, result.stderr, rel) from e
                logger.warning("Unparseable shellcheck output for %s: %s", rel, e)
                continue
            found = parse_shellcheck_output(items, rel, _source_lines(path)) if isinstance(items, list) else []
            if broken and not found:
                raise self.tool_failure(result.returncode, result.stderr, rel)
            matches.extend(found)

        return ScanRun(self.name, tuple(matches), files_scanned=len(files))
