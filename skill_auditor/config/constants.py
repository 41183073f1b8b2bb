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
Constants for Skill Auditor.
"""

from pathlib import Path

from .._version import __version__ as PACKAGE_VERSION


class SkillAuditorConstants:
    """Constants used throughout the auditor."""

    VERSION = PACKAGE_VERSION
    TOOL_NAME = "skill-auditor"

    # Resource paths
    PACKAGE_ROOT = Path(__file__).parent.parent
    DATA_DIR = PACKAGE_ROOT / "data"
    RULES_DIR = DATA_DIR / "rules"

    # Skill layout
    MANIFEST_FILENAME = "SKILL.md"
    README_FILENAME = "README.md"
    SUPPRESSION_FILENAME = ".skill-auditor-ignore"

    # Configuration discovery
    DEFAULT_CONFIG_FILENAME = "skill-auditor.yaml"
    CONFIG_ENV_VAR = "SKILL_AUDITOR_CONFIG"

    # Inline suppression tokens (matched case-insensitively after a comment '#')
    INLINE_MARKERS = ("audit:ignore", "skill-auditor:ignore")

    # External tools
    SEMGREP_TIMEOUT_SECONDS = 30
    DEFAULT_TOOL_TIMEOUT_SECONDS = 120

    # Snippets longer than SNIPPET_MAX_CHARS are cut to SNIPPET_CUT_CHARS + "..."
    SNIPPET_MAX_CHARS = 120
    SNIPPET_CUT_CHARS = 117

    # Manifest limits
    MAX_NAME_LENGTH = 64
    MAX_DESCRIPTION_LENGTH = 1024
    MAX_SKILL_MD_LINES = 500

    # Scanner names, in report order
    SCANNER_NAMES = (
        "bash_patterns",
        "prompt",
        "package_install",
        "frontmatter",
        "shellcheck",
        "secrets",
        "semgrep",
    )

    # Allowlist defaults
    DEFAULT_ALLOWED_REGISTRIES = ("registry.npmjs.org", "pypi.org", "files.pythonhosted.org")
    DEFAULT_ALLOWED_DOMAINS = (
        "registry.npmjs.org",
        "npmjs.org",
        "github.com",
        "githubusercontent.com",
        "pypi.org",
    )

    # Exit codes
    EXIT_PASS = 0
    EXIT_FAIL = 1
    EXIT_ERROR = 2

    @classmethod
    def get_rules_path(cls) -> Path:
        """Get path to the built-in rule table directory."""
        return cls.RULES_DIR
