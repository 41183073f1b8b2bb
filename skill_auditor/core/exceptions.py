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

"""Skill Auditor exceptions.

All exceptions inherit from SkillAuditorError for easy catching. The CLI
maps every SkillAuditorError to exit code 2; audit failures (findings) are
never raised, they are reported through the verdict.

Example:
    >>> from skill_auditor.core.orchestrator import SkillAuditor
    >>> from skill_auditor.core.exceptions import CollectionPathError
    >>>
    >>> auditor = SkillAuditor()
    >>>
    >>> try:
    ...     report = auditor.audit("path/to/skills")
    ... except CollectionPathError as e:
    ...     print(f"Use audit-all instead: {e}")
"""


class SkillAuditorError(Exception):
    """Base exception for all Skill Auditor errors."""

    pass


class ConfigError(SkillAuditorError):
    """Raised when configuration data cannot be loaded.

    This can indicate:
    - Missing explicit configuration file
    - Invalid YAML syntax
    - Wrong value types or unknown scanner names
    """

    pass


class RuleCatalogError(ConfigError):
    """Raised when the rule table is malformed.

    Covers duplicate rule ids, missing fields, unknown severities and
    patterns that fail to compile. Always fatal at startup.
    """

    pass


class SuppressionFileError(ConfigError):
    """Raised when a skill's suppression file is malformed."""

    pass


class CatalogMismatchError(SkillAuditorError):
    """Raised when a scanner emits a rule id the catalog does not know."""

    def __init__(self, rule_id: str, scanner: str | None = None):
        self.rule_id = rule_id
        self.scanner = scanner
        origin = f" (emitted by scanner '{scanner}')" if scanner else ""
        super().__init__(f"Rule '{rule_id}' is not defined in the rule catalog{origin}")


class UsageError(SkillAuditorError):
    """Raised when an operation is invoked on the wrong kind of target."""

    pass


class SkillPathError(UsageError):
    """Raised when the target path does not exist or is not a directory."""

    pass


class CollectionPathError(UsageError):
    """Raised when a collection directory is given to the single-skill audit.

    Carries the discovered child skill directories so callers can suggest
    per-skill commands.
    """

    def __init__(self, path, skill_dirs):
        self.path = path
        self.skill_dirs = list(skill_dirs)
        super().__init__(
            f"'{path}' looks like a skills collection directory, not a single skill. "
            f"Use 'audit-all {path}' to audit all {len(self.skill_dirs)} skills."
        )


class ScannerError(SkillAuditorError):
    """Raised inside a scanner when its work cannot complete.

    The orchestrator converts it into a Failed outcome for that scanner.
    """

    pass


class ToolUnavailableError(ScannerError):
    """Raised when an external tool is absent or exceeded its deadline.

    Scanners report it as a Skipped outcome, not a failure.
    """

    def __init__(self, tool: str, reason: str):
        self.tool = tool
        self.reason = reason
        super().__init__(reason)


class ManifestParseError(SkillAuditorError):
    """Raised when SKILL.md frontmatter cannot be parsed.

    The frontmatter scanner reports it as a finding rather than letting it
    abort the audit.
    """

    pass
