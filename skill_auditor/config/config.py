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
Audit configuration.

Loaded once from ``skill-auditor.yaml`` before any scan starts and treated as
read-only afterwards. Sections omitted from the file keep their defaults.

Example::

    allowlist:
      registries: [registry.npmjs.org, pypi.org]
      domains: [github.com]
    strict:
      enabled: false
    scanners:
      semgrep: false
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from ..core.exceptions import ConfigError
from .constants import SkillAuditorConstants

logger = logging.getLogger(__name__)


def _normalize_entries(values: Any, key: str) -> tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise ConfigError(f"allowlist.{key} must be a list of strings")
    entries = []
    for value in values:
        entry = str(value).strip().lower()
        if entry:
            entries.append(entry)
    return tuple(entries)


@dataclass(frozen=True)
class AllowlistConfig:
    """Approved registries (package installs) and domains (outbound HTTP)."""

    registries: tuple[str, ...] = SkillAuditorConstants.DEFAULT_ALLOWED_REGISTRIES
    domains: tuple[str, ...] = SkillAuditorConstants.DEFAULT_ALLOWED_DOMAINS

    def for_kind(self, kind: str) -> tuple[str, ...]:
        return self.registries if kind == "registries" else self.domains


@dataclass(frozen=True)
class AuditConfig:
    """Configuration for one auditor run."""

    allowlist: AllowlistConfig = field(default_factory=AllowlistConfig)
    strict: bool = False
    scanners: dict[str, bool] = field(default_factory=dict)
    """Per-scanner enable map; scanners not listed are enabled."""
    source: str | None = None

    def is_scanner_enabled(self, name: str) -> bool:
        return self.scanners.get(name, True)

    def with_strict(self, strict: bool = True) -> AuditConfig:
        """Return a copy with strict mode forced to *strict*."""
        return replace(self, strict=strict)

    @classmethod
    def default(cls) -> AuditConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> AuditConfig:
        """Build a config from already-parsed YAML data.

        Raises:
            ConfigError: On wrong types or unknown scanner names.
        """
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping")

        allowlist = AllowlistConfig()
        al = data.get("allowlist") or {}
        if not isinstance(al, dict):
            raise ConfigError("'allowlist' must be a mapping")
        if "registries" in al:
            allowlist = replace(allowlist, registries=_normalize_entries(al["registries"], "registries"))
        if "domains" in al:
            allowlist = replace(allowlist, domains=_normalize_entries(al["domains"], "domains"))

        st = data.get("strict") or {}
        if isinstance(st, bool):
            strict = st
        elif isinstance(st, dict):
            strict = st.get("enabled", False)
            if not isinstance(strict, bool):
                raise ConfigError("'strict.enabled' must be true or false")
        else:
            raise ConfigError("'strict' must be a mapping with an 'enabled' key")

        sc = data.get("scanners") or {}
        if not isinstance(sc, dict):
            raise ConfigError("'scanners' must be a mapping of scanner name to true/false")
        scanners = {}
        for name, enabled in sc.items():
            if name not in SkillAuditorConstants.SCANNER_NAMES:
                known = ", ".join(SkillAuditorConstants.SCANNER_NAMES)
                raise ConfigError(f"Unknown scanner '{name}' in configuration (known: {known})")
            if not isinstance(enabled, bool):
                raise ConfigError(f"scanners.{name} must be true or false")
            scanners[name] = enabled

        return cls(allowlist=allowlist, strict=strict, scanners=scanners, source=source)

    @classmethod
    def from_yaml(cls, path: str | Path) -> AuditConfig:
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration {path}: {e}") from e
        return cls.from_dict(raw, source=str(path))


def load_config(path: str | Path | None = None, search_dir: str | Path | None = None) -> AuditConfig:
    """Resolve and load the active configuration.

    Lookup order: *path*, then ``$SKILL_AUDITOR_CONFIG``, then
    ``skill-auditor.yaml`` in *search_dir* (default: the working directory).
    Built-in defaults apply when none exists.

    Raises:
        ConfigError: If an explicitly named file is missing or malformed.
    """
    explicit = path or os.environ.get(SkillAuditorConstants.CONFIG_ENV_VAR)
    if explicit:
        explicit = Path(explicit)
        if not explicit.is_file():
            raise ConfigError(f"Configuration file not found: {explicit}")
        logger.debug("Using configuration %s", explicit)
        return AuditConfig.from_yaml(explicit)

    candidate = Path(search_dir or Path.cwd()) / SkillAuditorConstants.DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        logger.debug("Using configuration %s", candidate)
        return AuditConfig.from_yaml(candidate)
    return AuditConfig.default()
