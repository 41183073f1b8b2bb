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
Tests for configuration module.
"""

import pytest

from skill_auditor.config.config import AllowlistConfig, AuditConfig, load_config
from skill_auditor.config.constants import SkillAuditorConstants
from skill_auditor.core.exceptions import ConfigError


class TestAuditConfigDefaults:
    """Test built-in defaults."""

    def test_defaults(self):
        config = AuditConfig.default()

        assert config.strict is False
        assert config.source is None
        assert config.allowlist.registries == SkillAuditorConstants.DEFAULT_ALLOWED_REGISTRIES
        assert "github.com" in config.allowlist.domains
        for name in SkillAuditorConstants.SCANNER_NAMES:
            assert config.is_scanner_enabled(name)

    def test_with_strict_returns_copy(self):
        config = AuditConfig.default()
        strict = config.with_strict()
        assert strict.strict is True
        assert config.strict is False

    def test_allowlist_for_kind(self):
        allowlist = AllowlistConfig(registries=("r.example",), domains=("d.example",))
        assert allowlist.for_kind("registries") == ("r.example",)
        assert allowlist.for_kind("domains") == ("d.example",)


class TestAuditConfigFromYaml:
    """Test loading from YAML files."""

    def test_empty_file_keeps_defaults(self, make_config):
        config = make_config("")
        assert config.allowlist == AllowlistConfig()
        assert config.strict is False

    def test_full_file(self, make_config):
        config = make_config(
            """
            allowlist:
              registries: [NPM.Internal.Example, " pypi.org "]
              domains: [GitHub.com]
            strict:
              enabled: true
            scanners:
              semgrep: false
            """
        )
        assert config.allowlist.registries == ("npm.internal.example", "pypi.org")
        assert config.allowlist.domains == ("github.com",)
        assert config.strict is True
        assert not config.is_scanner_enabled("semgrep")
        assert config.is_scanner_enabled("shellcheck")
        assert config.source.endswith(".yaml")

    def test_omitted_allowlist_key_keeps_default(self, make_config):
        config = make_config("allowlist:\n  domains: [example.com]\n")
        assert config.allowlist.registries == SkillAuditorConstants.DEFAULT_ALLOWED_REGISTRIES
        assert config.allowlist.domains == ("example.com",)

    def test_empty_allowlist_allows_nothing(self, make_config):
        assert make_config("allowlist:\n  domains: []\n").allowlist.domains == ()

    def test_strict_shorthand(self, make_config):
        assert make_config("strict: true\n").strict is True

    @pytest.mark.parametrize(
        "text",
        [
            "scanners:\n  yara: false\n",
            "scanners:\n  semgrep: maybe\n",
            "scanners: [semgrep]\n",
            "allowlist:\n  domains: github.com\n",
            "allowlist: [github.com]\n",
            "strict:\n  enabled: yes please\n",
            "strict: 3\n",
            "- a list\n",
            "allowlist: [\n",
        ],
    )
    def test_invalid(self, make_config, text):
        with pytest.raises(ConfigError):
            make_config(text)

    def test_unknown_scanner_message(self, make_config):
        with pytest.raises(ConfigError, match="Unknown scanner 'yara'"):
            make_config("scanners:\n  yara: false\n")


class TestLoadConfig:
    """Test the configuration lookup order."""

    @pytest.fixture(autouse=True)
    def _no_env(self, monkeypatch):
        monkeypatch.delenv(SkillAuditorConstants.CONFIG_ENV_VAR, raising=False)

    def test_defaults_when_nothing_found(self, tmp_path):
        assert load_config(search_dir=tmp_path) == AuditConfig.default()

    def test_working_directory_file(self, tmp_path):
        (tmp_path / "skill-auditor.yaml").write_text("strict: true\n", encoding="utf-8")
        config = load_config(search_dir=tmp_path)
        assert config.strict is True
        assert config.source == str(tmp_path / "skill-auditor.yaml")

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        (tmp_path / "skill-auditor.yaml").write_text("strict: true\n", encoding="utf-8")
        env_file = tmp_path / "env.yaml"
        env_file.write_text("strict: true\n", encoding="utf-8")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("scanners:\n  semgrep: false\n", encoding="utf-8")
        monkeypatch.setenv(SkillAuditorConstants.CONFIG_ENV_VAR, str(env_file))

        config = load_config(explicit, search_dir=tmp_path)
        assert config.strict is False
        assert not config.is_scanner_enabled("semgrep")

    def test_env_var(self, tmp_path, monkeypatch):
        (tmp_path / "skill-auditor.yaml").write_text("strict: false\n", encoding="utf-8")
        env_file = tmp_path / "env.yaml"
        env_file.write_text("strict: true\n", encoding="utf-8")
        monkeypatch.setenv(SkillAuditorConstants.CONFIG_ENV_VAR, str(env_file))

        assert load_config(search_dir=tmp_path).strict is True

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_missing_env_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(SkillAuditorConstants.CONFIG_ENV_VAR, str(tmp_path / "missing.yaml"))
        with pytest.raises(ConfigError):
            load_config(search_dir=tmp_path)
