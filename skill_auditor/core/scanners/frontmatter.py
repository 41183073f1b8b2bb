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
SKILL.md manifest scanner.

Header rules run against the parsed frontmatter fields, body rules against the
markdown after the header. Thresholds, word lists and patterns come from the
rule table so the checks here stay structural.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ...config.config import AuditConfig
from ...config.constants import SkillAuditorConstants
from ..exceptions import ManifestParseError
from ..manifest import ManifestField, SkillManifest, parse_manifest
from ..models import RawMatch, ScanRun
from ..rule_catalog import CheckMatcher, PatternMatcher
from .base import BaseScanner, make_snippet, read_text

logger = logging.getLogger(__name__)

MANIFEST = SkillAuditorConstants.MANIFEST_FILENAME


class FrontmatterScanner(BaseScanner):
    """Validates SKILL.md presence, header fields and body content."""

    name = "frontmatter"
    description = "SKILL.md frontmatter and allowed-tools audit"

    def _scan(self, skill_root: Path, config: AuditConfig) -> ScanRun:
        matches: list[RawMatch] = []
        skill_md = skill_root / MANIFEST

        if not skill_md.is_file():
            matches.append(RawMatch("frontmatter/missing-skill-md", MANIFEST))
            return ScanRun(self.name, tuple(matches))

        if (skill_root / SkillAuditorConstants.README_FILENAME).is_file():
            matches.append(RawMatch("frontmatter/readme-in-skill", SkillAuditorConstants.README_FILENAME))

        try:
            content = read_text(skill_md)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", skill_md, e)
            matches.append(RawMatch("frontmatter/read-error", MANIFEST, message=f"Could not read file: {e}"))
            return ScanRun(self.name, tuple(matches), files_scanned=1)

        try:
            manifest = parse_manifest(content)
        except ManifestParseError as e:
            matches.append(
                RawMatch("frontmatter/invalid-frontmatter", MANIFEST, 1, message=f"SKILL.md frontmatter is invalid: {e}")
            )
            manifest = None

        if manifest is not None:
            if manifest.name is not None:
                matches.extend(self._check_name(manifest.name))
            matches.extend(self._check_description(manifest))
            matches.extend(self._check_allowed_tools(manifest))
            matches.extend(self._check_body(manifest))

        max_lines = self._param("frontmatter/skill-body-too-long", "max_lines", SkillAuditorConstants.MAX_SKILL_MD_LINES)
        line_count = len(content.splitlines())
        if line_count > max_lines:
            matches.append(
                RawMatch(
                    "frontmatter/skill-body-too-long",
                    MANIFEST,
                    message=f"SKILL.md is {line_count} lines, maximum is {max_lines}",
                )
            )

        return ScanRun(self.name, tuple(matches), files_scanned=1)

    # -- header ----------------------------------------------------------------

    def _param(self, rule_id: str, key: str, default):
        rule = self.catalog.require(rule_id, self.name)
        if isinstance(rule.matcher, CheckMatcher):
            return rule.matcher.params.get(key, default)
        return default

    def _xml_match(self, field_name: str, value: ManifestField) -> RawMatch | None:
        markers = self._param("frontmatter/xml-in-frontmatter", "markers", ["<", ">", "&lt;", "&gt;", "&#"])
        lowered = value.value.lower()
        if any(marker in lowered for marker in markers):
            return RawMatch(
                "frontmatter/xml-in-frontmatter",
                MANIFEST,
                value.line,
                make_snippet(value.value),
                message=f"XML/HTML angle brackets in '{field_name}' field, a potential prompt injection vector",
            )
        return None

    def _check_name(self, name: ManifestField) -> list[RawMatch]:
        matches = []
        value = name.value
        lowered = value.lower()

        xml = self._xml_match("name", name)
        if xml:
            matches.append(xml)

        words = self._param("frontmatter/name-reserved-word", "words", ["claude", "anthropic"])
        if any(word in lowered for word in words):
            matches.append(RawMatch("frontmatter/name-reserved-word", MANIFEST, name.line, value))

        if any(ch.isupper() for ch in value) or " " in value or "_" in value:
            matches.append(RawMatch("frontmatter/invalid-name-format", MANIFEST, name.line, value))

        max_length = self._param("frontmatter/name-too-long", "max_length", SkillAuditorConstants.MAX_NAME_LENGTH)
        if len(value) > max_length:
            matches.append(
                RawMatch(
                    "frontmatter/name-too-long",
                    MANIFEST,
                    name.line,
                    make_snippet(value),
                    message=f"Skill name is {len(value)} chars, maximum is {max_length}",
                )
            )

        terms = set(self._param("frontmatter/name-too-vague", "terms", []))
        if any(segment in terms for segment in lowered.split("-")):
            matches.append(RawMatch("frontmatter/name-too-vague", MANIFEST, name.line, value))

        return matches

    def _check_description(self, manifest: SkillManifest) -> list[RawMatch]:
        description = manifest.description
        if description is None:
            # Point at the key when it is present but empty
            return [RawMatch("frontmatter/description-missing", MANIFEST, manifest.line_of("description"))]

        matches = []
        value = description.value

        xml = self._xml_match("description", description)
        if xml:
            matches.append(xml)

        max_length = self._param(
            "frontmatter/description-too-long", "max_length", SkillAuditorConstants.MAX_DESCRIPTION_LENGTH
        )
        if len(value) > max_length:
            matches.append(
                RawMatch(
                    "frontmatter/description-too-long",
                    MANIFEST,
                    description.line,
                    message=f"Description is {len(value)} chars, maximum is {max_length}",
                )
            )

        for rule in self.catalog.pattern_rules(self.name, target="description"):
            if rule.matcher.search(value):
                matches.append(RawMatch(rule.id, MANIFEST, description.line, make_snippet(value)))

        phrases = self._param("frontmatter/description-no-trigger", "phrases", [])
        lowered = value.lower()
        if phrases and not any(phrase in lowered for phrase in phrases):
            matches.append(RawMatch("frontmatter/description-no-trigger", MANIFEST, description.line))

        return matches

    def _check_allowed_tools(self, manifest: SkillManifest) -> list[RawMatch]:
        matches = []
        for tool in manifest.allowed_tools:
            text = tool.value.strip()
            if text.lower() == "bash" and "(" not in text:
                matches.append(RawMatch("frontmatter/bare-bash-tool", MANIFEST, tool.line, text))
        return matches

    # -- body ------------------------------------------------------------------

    def _check_body(self, manifest: SkillManifest) -> list[RawMatch]:
        matches = []
        for rule in self.catalog.pattern_rules(self.name, target="body"):
            matcher: PatternMatcher = rule.matcher
            for line_no, line in manifest.body_lines():
                if matcher.search(line):
                    matches.append(RawMatch(rule.id, MANIFEST, line_no, make_snippet(line)))
                    if matcher.first_only:
                        break
        return matches
