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
Prompt injection scanner for markdown, text and YAML files.
"""

from __future__ import annotations

from pathlib import Path

from .base import PatternScanner

# Legal and attribution boilerplate quotes third-party text and is not read
# as skill instructions.
BENIGN_FILE_STEMS = frozenset(
    {
        "license",
        "licence",
        "changelog",
        "notice",
        "authors",
        "contributors",
        "copying",
        "patents",
        "version",
        "history",
    }
)


def is_benign_file(path: Path) -> bool:
    """True for boilerplate files such as LICENSE or CHANGELOG.md (case-insensitive)."""
    return path.stem.lower() in BENIGN_FILE_STEMS


class PromptInjectionScanner(PatternScanner):
    """Detects instruction overrides, jailbreaks and exfiltration requests."""

    name = "prompt"
    description = "Prompt injection in skill instructions"
    extensions = ("md", "txt", "yaml", "yml")
    read_error_rule = "prompt/read-error"

    def should_skip(self, path: Path) -> bool:
        return is_benign_file(path)
