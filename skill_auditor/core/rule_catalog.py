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
Rule catalog: immutable table of rule definitions loaded from YAML.

Each scanner ships one YAML file under ``data/rules/``. A rule carries its
id, severity, description, remediation and exactly one matcher:

* ``patterns`` (optionally with ``exclude_patterns`` and an allowlist) -
  regexes applied line by line by the built-in scanners.
* ``check`` - a structural check implemented in the owning scanner.
* ``external`` - a delegation marker: the finding comes from an external
  tool. A rule id ending in ``/*`` delegates the whole namespace.

The catalog is built once per process and shared read-only by every
concurrent scan.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Union

import yaml

from ..config.constants import SkillAuditorConstants
from .exceptions import CatalogMismatchError, RuleCatalogError
from .models import Severity

logger = logging.getLogger(__name__)

ALLOWLIST_KINDS = ("domains", "registries")
PATTERN_TARGETS = ("line", "description", "body")


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PatternMatcher:
    """Line-oriented regex matcher."""

    patterns: tuple[re.Pattern, ...]
    exclude_patterns: tuple[re.Pattern, ...] = ()
    allowlist: str | None = None
    """Allowlist consulted before a match becomes a finding (``domains`` or ``registries``)."""
    allowlist_group: int | None = None
    """Capture group holding the URL to check; ``None`` checks every URL on the line."""
    target: str = "line"
    first_only: bool = False

    kind = "pattern"

    def search(self, text: str) -> re.Match | None:
        """Return the first pattern match in *text*, or None when excluded."""
        for exclude in self.exclude_patterns:
            if exclude.search(text):
                return None
        for pattern in self.patterns:
            match = pattern.search(text)
            if match:
                return match
        return None


@dataclass(frozen=True)
class CheckMatcher:
    """Structural check implemented by the owning scanner."""

    params: Mapping[str, Any] = field(default_factory=dict)

    kind = "check"


@dataclass(frozen=True)
class ExternalMatcher:
    """Delegation marker: the owning external tool decides what matches."""

    tool: str

    kind = "external"


Matcher = Union[PatternMatcher, CheckMatcher, ExternalMatcher]


# ---------------------------------------------------------------------------
# Rule definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleDefinition:
    """Immutable description of one rule."""

    id: str
    """Namespaced id, ``<category>/<short-id>``."""

    severity: Severity
    """Default severity."""

    category: str
    """Namespace part of the id (``bash``, ``prompt``, ...)."""

    scanner: str
    """Name of the scanner that emits this rule."""

    description: str

    remediation: str

    matcher: Matcher

    @property
    def is_namespace(self) -> bool:
        return self.id.endswith("/*")

    @property
    def matcher_kind(self) -> str:
        return self.matcher.kind

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "category": self.category,
            "scanner": self.scanner,
            "description": self.description,
            "remediation": self.remediation,
            "matcher": self.matcher.kind,
        }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class RuleCatalog:
    """Read-only lookup table of RuleDefinitions."""

    def __init__(self, rules: Iterable[RuleDefinition] = ()):
        self._rules: dict[str, RuleDefinition] = {}
        for rule in rules:
            if rule.id in self._rules:
                raise RuleCatalogError(f"Duplicate rule id '{rule.id}'")
            self._rules[rule.id] = rule
        self._ordered = sorted(self._rules.values(), key=lambda r: (r.category, r.id))

    def lookup(self, rule_id: str) -> RuleDefinition | None:
        """Resolve *rule_id*, falling back to a ``<category>/*`` delegation entry.

        Returns:
            The matching RuleDefinition, or None if the id is unknown.
        """
        rule = self._rules.get(rule_id)
        if rule is not None:
            return rule
        category, sep, _ = rule_id.partition("/")
        if not sep:
            return None
        namespace = self._rules.get(f"{category}/*")
        if namespace is None:
            return None
        return replace(namespace, id=rule_id)

    def require(self, rule_id: str, scanner: str | None = None) -> RuleDefinition:
        """Like :meth:`lookup` but raise CatalogMismatchError for unknown ids."""
        rule = self.lookup(rule_id)
        if rule is None:
            raise CatalogMismatchError(rule_id, scanner)
        return rule

    def all(self) -> list[RuleDefinition]:
        """All rules, grouped by category then id."""
        return list(self._ordered)

    def for_scanner(self, scanner: str) -> list[RuleDefinition]:
        return [r for r in self._ordered if r.scanner == scanner]

    def pattern_rules(self, scanner: str, target: str = "line") -> list[RuleDefinition]:
        return [
            r
            for r in self._ordered
            if r.scanner == scanner and isinstance(r.matcher, PatternMatcher) and r.matcher.target == target
        ]

    def scanners(self) -> list[str]:
        return sorted({r.scanner for r in self._ordered})

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return isinstance(rule_id, str) and self.lookup(rule_id) is not None

    def __iter__(self) -> Iterator[RuleDefinition]:
        return iter(self._ordered)

    # -- loading -----------------------------------------------------------

    @classmethod
    def from_directory(cls, directory: str | Path) -> RuleCatalog:
        """Load every ``*.yaml`` rule file in *directory*.

        Raises:
            RuleCatalogError: On any malformed file, rule or duplicate id.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise RuleCatalogError(f"Rule directory not found: {directory}")
        rules: list[RuleDefinition] = []
        for path in sorted(directory.glob("*.yaml")):
            rules.extend(load_rule_file(path))
        return cls(rules)

    @classmethod
    def from_dicts(cls, scanner: str, entries: Iterable[Mapping[str, Any]], source: str = "<memory>") -> RuleCatalog:
        return cls(parse_rule(entry, scanner, source) for entry in entries)


def load_rule_file(path: str | Path) -> list[RuleDefinition]:
    """Parse one YAML rule file into RuleDefinitions."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        raise RuleCatalogError(f"Failed to load rule file {path}: {e}") from e

    if not isinstance(raw, dict) or not isinstance(raw.get("rules"), list):
        raise RuleCatalogError(f"Rule file {path} must be a mapping with a 'rules' list")

    default_scanner = raw.get("scanner")
    rules = []
    for entry in raw["rules"]:
        if not isinstance(entry, dict):
            raise RuleCatalogError(f"{path}: every rule must be a mapping, got {entry!r}")
        scanner = entry.get("scanner", default_scanner)
        if not scanner:
            raise RuleCatalogError(f"{path}: rule {entry.get('id')!r} has no scanner")
        rules.append(parse_rule(entry, scanner, str(path)))
    logger.debug("Loaded %d rules from %s", len(rules), path)
    return rules


def parse_rule(entry: Mapping[str, Any], scanner: str, source: str) -> RuleDefinition:
    """Build a RuleDefinition from one YAML mapping."""
    rule_id = entry.get("id")
    if not isinstance(rule_id, str) or "/" not in rule_id:
        raise RuleCatalogError(f"{source}: rule id must look like '<category>/<id>', got {rule_id!r}")

    for key in ("severity", "description", "remediation"):
        if not entry.get(key):
            raise RuleCatalogError(f"{source}: rule {rule_id} is missing '{key}'")

    try:
        severity = Severity.from_string(entry["severity"])
    except ValueError as e:
        raise RuleCatalogError(f"{source}: rule {rule_id}: {e}") from e

    return RuleDefinition(
        id=rule_id,
        severity=severity,
        category=rule_id.split("/", 1)[0],
        scanner=scanner,
        description=str(entry["description"]).strip(),
        remediation=str(entry["remediation"]).strip(),
        matcher=_parse_matcher(entry, rule_id, scanner, source),
    )


def _parse_matcher(entry: Mapping[str, Any], rule_id: str, scanner: str, source: str) -> Matcher:
    kinds = [k for k in ("patterns", "check", "external") if entry.get(k)]
    if len(kinds) != 1:
        raise RuleCatalogError(
            f"{source}: rule {rule_id} must define exactly one of 'patterns', 'check' or 'external'"
        )
    kind = kinds[0]

    if kind == "check":
        params = entry.get("params") or {}
        if not isinstance(params, dict):
            raise RuleCatalogError(f"{source}: rule {rule_id}: 'params' must be a mapping")
        return CheckMatcher(params=params)

    if kind == "external":
        return ExternalMatcher(tool=scanner)

    if rule_id.endswith("/*"):
        raise RuleCatalogError(f"{source}: namespace rule {rule_id} cannot carry patterns")

    allowlist = entry.get("allowlist")
    if allowlist is not None and allowlist not in ALLOWLIST_KINDS:
        raise RuleCatalogError(f"{source}: rule {rule_id}: unknown allowlist '{allowlist}'")
    target = entry.get("target", "line")
    if target not in PATTERN_TARGETS:
        raise RuleCatalogError(f"{source}: rule {rule_id}: unknown target '{target}'")
    group = entry.get("allowlist_group")
    if group is not None and (not isinstance(group, int) or isinstance(group, bool)):
        raise RuleCatalogError(f"{source}: rule {rule_id}: 'allowlist_group' must be an integer")

    patterns = _compile_all(entry["patterns"], rule_id, source)
    for pattern in patterns:
        if group is not None and group > pattern.groups:
            raise RuleCatalogError(f"{source}: rule {rule_id}: pattern has no group {group}")
    return PatternMatcher(
        patterns=patterns,
        exclude_patterns=_compile_all(entry.get("exclude_patterns") or [], rule_id, source),
        allowlist=allowlist,
        allowlist_group=group,
        target=target,
        first_only=bool(entry.get("first_only", False)),
    )


def _compile_all(patterns: Any, rule_id: str, source: str) -> tuple[re.Pattern, ...]:
    if isinstance(patterns, str):
        patterns = [patterns]
    if not isinstance(patterns, list):
        raise RuleCatalogError(f"{source}: rule {rule_id}: patterns must be a list of strings")
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(str(pattern)))
        except re.error as e:
            raise RuleCatalogError(f"{source}: rule {rule_id}: invalid pattern {pattern!r}: {e}") from e
    return tuple(compiled)


@lru_cache(maxsize=1)
def load_default_catalog() -> RuleCatalog:
    """Load (once) the built-in rule table shipped with the package."""
    return RuleCatalog.from_directory(SkillAuditorConstants.get_rules_path())
