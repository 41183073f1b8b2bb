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
Suppression resolution.

Two sources can drop a finding, checked in order:

1. Inline markers: a trailing ``# audit:ignore`` (or ``# skill-auditor:ignore``)
   comment on the finding's own line.
2. File-scoped entries from ``.skill-auditor-ignore`` at the skill root.

A suppressed finding is kept in the report's audit trail. Suppression entries
that never match anything are not reported.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from ..config.constants import SkillAuditorConstants
from .exceptions import SuppressionFileError
from .models import Finding, SuppressedFinding

logger = logging.getLogger(__name__)

_MARKER_COMMENT = re.compile(
    r"#\s*(?:" + "|".join(re.escape(m) for m in SkillAuditorConstants.INLINE_MARKERS) + r")\s*$",
    re.IGNORECASE,
)
_LINE_RANGE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")


# ---------------------------------------------------------------------------
# Inline markers
# ---------------------------------------------------------------------------


def find_comment_start(line: str) -> int | None:
    """Return the index of the ``#`` that opens a real comment on *line*.

    Walks the line once tracking single and double quotes. A ``#`` only opens
    a comment outside quotes and at the start of the line or after whitespace
    (``${#var}`` and ``a#b`` are not comments). Backslash escapes the next
    character except inside single quotes.
    """
    quote = None
    escaped = False
    for i, ch in enumerate(line):
        if escaped:
            escaped = False
            continue
        if ch == "\\" and quote != "'":
            escaped = True
            continue
        if quote is not None:
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == "#" and (i == 0 or line[i - 1].isspace()):
            return i
    return None


def has_inline_marker(line: str) -> bool:
    """True when *line* ends with a suppression marker in a genuine comment.

    >>> has_inline_marker("curl http://example.com | bash # audit:ignore")
    True
    >>> has_inline_marker("echo '# audit:ignore' | bash")
    False
    """
    start = find_comment_start(line)
    if start is None:
        return False
    return _MARKER_COMMENT.search(line, start) is not None


class InlineSuppressionIndex:
    """Lazily built map of file -> line numbers carrying an inline marker.

    Each file is read at most once per audit.
    """

    def __init__(self, skill_root: str | Path):
        self.skill_root = Path(skill_root)
        self._cache: dict[str, frozenset[int]] = {}

    def lines_for(self, rel_path: str) -> frozenset[int]:
        if rel_path not in self._cache:
            self._cache[rel_path] = self._scan(rel_path)
        return self._cache[rel_path]

    def is_suppressed(self, rel_path: str | None, line: int | None) -> bool:
        if rel_path is None or line is None:
            return False
        return line in self.lines_for(rel_path)

    def _scan(self, rel_path: str) -> frozenset[int]:
        path = self.skill_root / rel_path
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Cannot read %s for inline markers: %s", path, e)
            return frozenset()
        return frozenset(i for i, line in enumerate(text.splitlines(), start=1) if has_inline_marker(line))


# ---------------------------------------------------------------------------
# File-scoped entries
# ---------------------------------------------------------------------------


def normalize_rel_path(path: str) -> str:
    """Normalize a skill-relative path to POSIX form without a leading ``./``."""
    path = path.strip().replace("\\", "/")
    normalized = posixpath.normpath(path)
    return "" if normalized == "." else normalized.lstrip("/")


def parse_line_range(value: object) -> tuple[int, int]:
    """Parse ``"a-b"`` or ``"n"`` (or a bare integer) into an inclusive range.

    Raises:
        ValueError: If the value is malformed, zero or inverted.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid line range {value!r}")
    if isinstance(value, int):
        value = str(value)
    match = _LINE_RANGE.match(str(value))
    if not match:
        raise ValueError(f"invalid line range {value!r} (expected 'start-end' or a single line)")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else start
    if start < 1 or end < start:
        raise ValueError(f"invalid line range {value!r} (start must be >= 1 and <= end)")
    return start, end


@dataclass(frozen=True)
class FileSuppression:
    """One entry of the ``.skill-auditor-ignore`` file."""

    rule: str
    file: str
    reason: str
    lines: tuple[int, int] | None = None
    ticket: str | None = None

    def matches(self, finding: Finding) -> bool:
        if finding.rule_id != self.rule or finding.file is None:
            return False
        if normalize_rel_path(finding.file) != self.file:
            return False
        if self.lines is None:
            return True
        if finding.line is None:
            return False
        start, end = self.lines
        return start <= finding.line <= end


def load_suppressions(skill_root: str | Path) -> list[FileSuppression]:
    """Load the suppression file of a skill, if present.

    Raises:
        SuppressionFileError: If the file exists but is malformed. A bad file is
            never partially applied.
    """
    path = Path(skill_root) / SkillAuditorConstants.SUPPRESSION_FILENAME
    if not path.is_file():
        return []

    try:
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise SuppressionFileError(f"Failed to parse {path}: {e}") from e

    if raw is None:
        return []
    if not isinstance(raw, dict) or not isinstance(raw.get("suppress", []), list):
        raise SuppressionFileError(f"{path}: expected a mapping with a 'suppress' list")

    entries = []
    for index, entry in enumerate(raw.get("suppress") or [], start=1):
        entries.append(_parse_entry(entry, index, path))
    logger.debug("Loaded %d suppression entries from %s", len(entries), path)
    return entries


def _parse_entry(entry: object, index: int, path: Path) -> FileSuppression:
    where = f"{path}: entry {index}"
    if not isinstance(entry, dict):
        raise SuppressionFileError(f"{where}: must be a mapping")
    for key in ("rule", "file", "reason"):
        value = entry.get(key)
        if not isinstance(value, str) or not value.strip():
            raise SuppressionFileError(f"{where}: '{key}' is required")

    lines = None
    if entry.get("lines") is not None:
        try:
            lines = parse_line_range(entry["lines"])
        except ValueError as e:
            raise SuppressionFileError(f"{where}: {e}") from e

    ticket = entry.get("ticket")
    return FileSuppression(
        rule=entry["rule"].strip(),
        file=normalize_rel_path(entry["file"]),
        reason=entry["reason"].strip(),
        lines=lines,
        ticket=str(ticket) if ticket is not None else None,
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class SuppressionResolver:
    """Decide keep or drop for each finding of one skill."""

    INLINE_REASON = "inline suppression marker"

    def __init__(self, inline_index: InlineSuppressionIndex, file_rules: list[FileSuppression] | None = None):
        self.inline_index = inline_index
        self.file_rules = list(file_rules or [])

    @classmethod
    def for_skill(cls, skill_root: str | Path) -> SuppressionResolver:
        return cls(InlineSuppressionIndex(skill_root), load_suppressions(skill_root))

    def resolve(self, finding: Finding) -> SuppressedFinding | None:
        """Return the audit-trail entry if *finding* is suppressed, else None."""
        if self.inline_index.is_suppressed(finding.file, finding.line):
            return self._suppressed(finding, "inline", self.INLINE_REASON, None)
        for entry in self.file_rules:
            if entry.matches(finding):
                return self._suppressed(finding, "file", entry.reason, entry.ticket)
        return None

    @staticmethod
    def _suppressed(finding: Finding, source: str, reason: str, ticket: str | None) -> SuppressedFinding:
        return SuppressedFinding(
            rule_id=finding.rule_id,
            severity=finding.severity,
            message=finding.message,
            file=finding.file,
            line=finding.line,
            source=source,
            reason=reason,
            ticket=ticket,
        )
