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
Base scanner interface and shared file helpers.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from ...config.config import AuditConfig
from ...config.constants import SkillAuditorConstants
from ..exceptions import ScannerError, ToolUnavailableError
from ..models import RawMatch, ScanOutcome, ScanRun
from ..process import ToolRunner
from ..rule_catalog import PatternMatcher, RuleCatalog, RuleDefinition

logger = logging.getLogger(__name__)

_URL_HOST = re.compile(r"(?i)https?://(?:[^@/?#\s]+@)?([^/?#:\s]+)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def collect_files(root: Path, extensions: tuple[str, ...]) -> list[Path]:
    """All files under *root* whose extension is in *extensions* (case-insensitive).

    Sorted by skill-relative path so scans are deterministic.
    """
    wanted = {ext.lower() for ext in extensions}
    files = [p for p in root.rglob("*") if p.is_file() and p.suffix.lstrip(".").lower() in wanted]
    return sorted(files, key=lambda p: rel_path(root, p))


def rel_path(root: Path, path: Path) -> str:
    """Skill-relative POSIX path of *path*."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def read_text(path: Path) -> str:
    """Read a UTF-8 text file; decoding errors propagate."""
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def make_snippet(line: str) -> str:
    snippet = line.strip()
    if len(snippet) > SkillAuditorConstants.SNIPPET_MAX_CHARS:
        snippet = snippet[: SkillAuditorConstants.SNIPPET_CUT_CHARS] + "..."
    return snippet


def is_comment_line(line: str) -> bool:
    """Shell comment line; shebangs are not comments."""
    stripped = line.strip()
    return stripped.startswith("#") and not stripped.startswith("#!")


def extract_hosts(text: str) -> list[str]:
    """Lowercased hosts of every http(s) URL in *text* (userinfo and port removed)."""
    return [m.group(1).lower() for m in _URL_HOST.finditer(text) if m.group(1)]


def host_is_allowed(host: str, allowlist: tuple[str, ...]) -> bool:
    return any(host == entry or host.endswith("." + entry) for entry in allowlist if entry)


def all_hosts_allowed(text: str, allowlist: tuple[str, ...]) -> bool:
    """True only when *text* contains at least one URL and every host is allowlisted."""
    hosts = extract_hosts(text)
    return bool(hosts) and all(host_is_allowed(host, allowlist) for host in hosts)


# ---------------------------------------------------------------------------
# Scanner base classes
# ---------------------------------------------------------------------------


class BaseScanner(ABC):
    """Abstract base class for all scanners.

    Subclasses implement :meth:`_scan`. The public :meth:`scan` handles the
    outcomes every scanner shares: disabled in config, required tool absent,
    tool deadline exceeded.
    """

    name: str = ""
    description: str = ""
    tool: str | None = None
    """External binary this scanner wraps, if any."""

    def __init__(self, catalog: RuleCatalog, runner: ToolRunner | None = None):
        """
        Initialize scanner.

        Args:
            catalog: Shared read-only rule catalog
            runner: External process runner (defaults to a real ToolRunner)
        """
        self.catalog = catalog
        self.runner = runner or ToolRunner()

    def is_available(self) -> bool:
        """Whether the scanner can run in this environment."""
        return self.tool is None or self.runner.is_available(self.tool)

    def scan(self, skill_root: str | Path, config: AuditConfig) -> ScanRun:
        """
        Scan a skill directory.

        Args:
            skill_root: Skill directory
            config: Active configuration

        Returns:
            ScanRun with raw matches and the outcome
        """
        if not config.is_scanner_enabled(self.name):
            return self.skipped("disabled in config")
        if not self.is_available():
            return self.skipped(f"{self.tool} not found on PATH")
        try:
            return self._scan(Path(skill_root), config)
        except ToolUnavailableError as e:
            return self.skipped(e.reason)
        except ScannerError as e:
            logger.warning("Scanner %s failed: %s", self.name, e)
            return ScanRun(self.name, outcome=ScanOutcome.failed(str(e)))

    @abstractmethod
    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        pass

    def skipped(self, reason: str) -> ScanRun:
        logger.info("Skipping %s: %s", self.name, reason)
        return ScanRun(self.name, outcome=ScanOutcome.skipped(reason))

    def get_name(self) -> str:
        return self.name


class PatternScanner(BaseScanner):
    """Scanner that applies the catalog's line pattern rules to matching files."""

    extensions: tuple[str, ...] = ()
    skip_comments = False
    read_error_rule = ""

    def rules(self) -> list[RuleDefinition]:
        return self.catalog.pattern_rules(self.name)

    def should_skip(self, path: Path) -> bool:
        return False

    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        rules = self.rules()
        matches: list[RawMatch] = []
        files_scanned = 0
        unreadable = 0

        for path in collect_files(skill_root, self.extensions):
            if self.should_skip(path):
                logger.debug("%s: skipping %s", self.name, path)
                continue
            files_scanned += 1
            rel = rel_path(skill_root, path)
            try:
                content = read_text(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not read %s: %s", path, e)
                unreadable += 1
                matches.append(RawMatch(self.read_error_rule, rel, message=f"Could not read file: {e}"))
                continue

            for line_no, line in enumerate(content.splitlines(), start=1):
                if self.skip_comments and is_comment_line(line):
                    continue
                for rule in rules:
                    if self.line_matches(rule, line, config):
                        matches.append(RawMatch(rule.id, rel, line_no, make_snippet(line)))

        if files_scanned and unreadable == files_scanned:
            # Nothing was actually scanned; the read-error findings still surface.
            outcome = ScanOutcome.failed(f"could not read any of the {files_scanned} file(s) collected")
            return ScanRun(self.name, tuple(matches), outcome, files_scanned)
        return ScanRun(self.name, tuple(matches), files_scanned=files_scanned)

    @staticmethod
    def line_matches(rule: RuleDefinition, line: str, config: AuditConfig) -> bool:
        """Apply one pattern rule to one line, honoring its allowlist."""
        matcher = rule.matcher
        if not isinstance(matcher, PatternMatcher):
            return False
        match = matcher.search(line)
        if match is None:
            return False
        if matcher.allowlist is None:
            return True
        text = line if matcher.allowlist_group is None else (match.group(matcher.allowlist_group) or "")
        return not all_hosts_allowed(text, config.allowlist.for_kind(matcher.allowlist))


class ExternalToolScanner(BaseScanner):
    """Base for scanners that delegate to an external binary through the ToolRunner."""

    timeout: float = SkillAuditorConstants.DEFAULT_TOOL_TIMEOUT_SECONDS

    @staticmethod
    def normalize_tool_path(skill_root: Path, reported: str | None) -> str | None:
        """Map a path printed by a tool to skill-relative POSIX form."""
        if not reported:
            return None
        path = Path(reported)
        root = skill_root.resolve()
        candidates = [path] if path.is_absolute() else [Path.cwd() / path, root / path]
        for candidate in candidates:
            try:
                return candidate.resolve().relative_to(root).as_posix()
            except (OSError, ValueError):
                continue
        return path.as_posix()

    def tool_failure(self, returncode: int, stderr: str, context: str = "") -> ScannerError:
        detail = stderr.strip() or "no output"
        where = f" on {context}" if context else ""
        return ScannerError(f"{self.tool} failed{where} (exit {returncode}): {detail}")
