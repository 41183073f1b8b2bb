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
Centralized scanner construction.

Every entry point builds scanners here, so adding a scanner only requires a
new variant class and an entry in ``SCANNER_CLASSES``.
"""

from __future__ import annotations

from ..process import ToolRunner
from ..rule_catalog import RuleCatalog
from .bash_patterns import BashPatternScanner
from .base import BaseScanner
from .frontmatter import FrontmatterScanner
from .package_install import PackageInstallScanner
from .prompt_injection import PromptInjectionScanner
from .secrets import SecretsScanner
from .semgrep import SemgrepScanner
from .shellcheck import ShellcheckScanner

# Report order
SCANNER_CLASSES: tuple[type[BaseScanner], ...] = (
    BashPatternScanner,
    PromptInjectionScanner,
    PackageInstallScanner,
    FrontmatterScanner,
    ShellcheckScanner,
    SecretsScanner,
    SemgrepScanner,
)

EXTERNAL_TOOLS = {cls.name: cls.tool for cls in SCANNER_CLASSES if cls.tool}


def build_scanners(catalog: RuleCatalog, runner: ToolRunner | None = None) -> list[BaseScanner]:
    """Build every scanner variant.

    Disabled scanners are still built: they report a Skipped outcome so the
    report shows why they did not run.

    Args:
        catalog: The shared rule catalog
        runner: Process runner handed to the external-tool wrappers

    Returns:
        Scanner instances in report order.
    """
    runner = runner or ToolRunner()
    return [cls(catalog, runner) for cls in SCANNER_CLASSES]
