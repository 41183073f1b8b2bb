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
Skill Auditor - Rule-based security auditor for agent skill directories.
"""

from ._version import __version__

__author__ = "Cisco Systems, Inc."


def __getattr__(name: str):
    """Lazy-load public API symbols on first access.

    Keeps ``python -m skill_auditor.cli.cli`` from importing the scanner
    stack twice through ``runpy``.
    """
    _lazy_map = {
        "AuditConfig": (".config.config", "AuditConfig"),
        "load_config": (".config.config", "load_config"),
        "SkillAuditorConstants": (".config.constants", "SkillAuditorConstants"),
        "AuditReport": (".core.models", "AuditReport"),
        "CollectionReport": (".core.models", "CollectionReport"),
        "Finding": (".core.models", "Finding"),
        "RawMatch": (".core.models", "RawMatch"),
        "Severity": (".core.models", "Severity"),
        "RuleCatalog": (".core.rule_catalog", "RuleCatalog"),
        "RuleDefinition": (".core.rule_catalog", "RuleDefinition"),
        "load_default_catalog": (".core.rule_catalog", "load_default_catalog"),
        "SkillAuditor": (".core.orchestrator", "SkillAuditor"),
        "audit_skill": (".core.orchestrator", "audit_skill"),
        "audit_collection": (".core.orchestrator", "audit_collection"),
        "verdict": (".core.verdict", "verdict"),
    }
    if name in _lazy_map:
        module_path, attr = _lazy_map[name]
        import importlib

        mod = importlib.import_module(module_path, __package__)
        val = getattr(mod, attr)
        globals()[name] = val
        return val
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "SkillAuditor",
    "audit_skill",
    "audit_collection",
    "AuditConfig",
    "load_config",
    "SkillAuditorConstants",
    "AuditReport",
    "CollectionReport",
    "Finding",
    "RawMatch",
    "Severity",
    "RuleCatalog",
    "RuleDefinition",
    "load_default_catalog",
    "verdict",
]
