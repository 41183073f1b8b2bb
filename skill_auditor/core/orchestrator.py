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
Audit orchestration.

SkillAuditor runs every scanner against one skill on a bounded thread pool,
enriches raw matches through the rule catalog, applies suppressions and
builds the AuditReport. ``audit_all`` fans the same pipeline out over the
skills of a collection directory.
"""

from __future__ import annotations

import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ..config.config import AuditConfig
from ..config.constants import SkillAuditorConstants
from .exceptions import CatalogMismatchError, CollectionPathError, SkillPathError, UsageError
from .models import (
    AuditReport,
    AuditStatus,
    CollectionReport,
    Finding,
    RawMatch,
    RiskLevel,
    ScannerResult,
    ScanOutcome,
    ScanRun,
    SuppressedFinding,
)
from .process import ToolRunner
from .rule_catalog import RuleCatalog, load_default_catalog
from .scanners.base import BaseScanner
from .scanners.factory import EXTERNAL_TOOLS, build_scanners
from .suppression import SuppressionResolver
from .verdict import compute_risk_level, compute_status

logger = logging.getLogger(__name__)


def has_manifest(directory: Path) -> bool:
    return (directory / SkillAuditorConstants.MANIFEST_FILENAME).is_file()


def find_skill_directories(directory: str | Path) -> list[Path]:
    """Immediate subdirectories containing SKILL.md, sorted by name."""
    directory = Path(directory)
    return sorted((item for item in directory.iterdir() if item.is_dir() and has_manifest(item)), key=lambda p: p.name)


def is_collection(directory: str | Path) -> bool:
    """A collection has no SKILL.md of its own but at least one child skill."""
    directory = Path(directory)
    return not has_manifest(directory) and bool(find_skill_directories(directory))


class SkillAuditor:
    """Runs the scanner set against skills and builds reports."""

    def __init__(
        self,
        config: AuditConfig | None = None,
        catalog: RuleCatalog | None = None,
        runner: ToolRunner | None = None,
        scanners: list[BaseScanner] | None = None,
        max_workers: int | None = None,
    ):
        """
        Initialize the auditor.

        Args:
            config: Active configuration (defaults when None)
            catalog: Rule catalog; the built-in table when None
            runner: External process runner shared by the tool wrappers
            scanners: Scanner set; built by the factory when None
            max_workers: Worker pool size; defaults to the CPU count
        """
        self.config = config or AuditConfig.default()
        self.catalog = catalog or load_default_catalog()
        self.runner = runner or ToolRunner()
        self.scanners = scanners if scanners is not None else build_scanners(self.catalog, self.runner)
        self.max_workers = max_workers or os.cpu_count() or 1

    # -- single skill ----------------------------------------------------------

    def audit(self, skill_directory: str | Path) -> AuditReport:
        """
        Audit a single skill directory.

        Raises:
            SkillPathError: If the path is missing or not a directory
            CollectionPathError: If the path is a collection of skills
            SuppressionFileError: If the skill's suppression file is malformed
            CatalogMismatchError: If a scanner emits an unknown rule id
        """
        path = self._require_directory(skill_directory)
        if is_collection(path):
            raise CollectionPathError(skill_directory, find_skill_directories(path))
        return self._audit_skill(path)

    def _audit_skill(self, path: Path, scanner_workers: int | None = None) -> AuditReport:
        resolver = SuppressionResolver.for_skill(path)
        runs = self._run_scanners(path, scanner_workers or self.max_workers)

        findings: list[Finding] = []
        suppressed: list[SuppressedFinding] = []
        results: list[ScannerResult] = []
        for run in runs:
            kept: list[Finding] = []
            dropped = 0
            for match in run.matches:
                finding = self._enrich(match, run.scanner)
                entry = resolver.resolve(finding)
                if entry is None:
                    kept.append(finding)
                else:
                    suppressed.append(entry)
                    dropped += 1
            findings.extend(kept)
            results.append(
                ScannerResult(
                    scanner=run.scanner,
                    status=run.outcome.status,
                    reason=run.outcome.reason,
                    files_scanned=run.files_scanned,
                    finding_count=len(kept),
                    suppressed_count=dropped,
                    max_severity=max((f.severity for f in kept), default=None),
                )
            )

        findings.sort(key=Finding.sort_key)
        suppressed.sort(key=SuppressedFinding.sort_key)
        strict = self.config.strict
        report = AuditReport(
            skill_name=path.resolve().name,
            skill_path=str(path),
            scanner_results=tuple(results),
            findings=tuple(findings),
            suppressed=tuple(suppressed),
            status=compute_status(findings, strict),
            risk_level=compute_risk_level(findings),
            strict=strict,
        )
        logger.debug(
            "Audited %s: %d findings, %d suppressed, status %s",
            report.skill_name,
            len(findings),
            len(suppressed),
            report.status.value,
        )
        return report

    def _run_scanners(self, path: Path, max_workers: int) -> list[ScanRun]:
        """Run every scanner concurrently; results come back in scanner order."""
        if not self.scanners:
            return []
        workers = min(max_workers, len(self.scanners))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scanner") as executor:
            futures = [(scanner, executor.submit(scanner.scan, path, self.config)) for scanner in self.scanners]
            runs = []
            for scanner, future in futures:
                try:
                    runs.append(future.result())
                except CatalogMismatchError:
                    raise
                except Exception as e:
                    # One scanner crashing never cancels its siblings.
                    logger.error("Scanner %s crashed on %s: %s", scanner.name, path, e)
                    runs.append(ScanRun(scanner.name, outcome=ScanOutcome.failed(f"{type(e).__name__}: {e}")))
        return runs

    def _enrich(self, match: RawMatch, scanner: str) -> Finding:
        rule = self.catalog.require(match.rule_id, scanner)
        return Finding(
            rule_id=match.rule_id,
            severity=match.severity or rule.severity,
            category=rule.category,
            message=match.message or rule.description,
            file=match.file,
            line=match.line,
            remediation=match.remediation or rule.remediation,
            scanner=scanner,
            snippet=match.snippet,
        )

    # -- collection ------------------------------------------------------------

    def audit_all(self, collection_directory: str | Path) -> CollectionReport:
        """
        Audit every immediate child skill of a collection directory.

        A skill whose audit raises is recorded as a failed report carrying
        the error; the remaining skills are still audited.

        Raises:
            SkillPathError: If the path is missing or not a directory
            UsageError: If no child directory contains SKILL.md
        """
        root = self._require_directory(collection_directory)
        skill_dirs = find_skill_directories(root)
        if not skill_dirs:
            raise UsageError(
                f"No skills found in '{collection_directory}': no immediate subdirectory contains "
                f"{SkillAuditorConstants.MANIFEST_FILENAME}"
            )

        logger.info("Auditing %d skills under %s", len(skill_dirs), root)
        workers = min(self.max_workers, len(skill_dirs))
        # Skill and scanner pools share one budget of max_workers threads.
        scanner_workers = max(1, self.max_workers // workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="skill") as executor:
            audit_one = functools.partial(self._audit_isolated, scanner_workers=scanner_workers)
            reports = list(executor.map(audit_one, skill_dirs))

        return CollectionReport(root=str(collection_directory), reports=tuple(reports), strict=self.config.strict)

    def _audit_isolated(self, path: Path, scanner_workers: int | None = None) -> AuditReport:
        try:
            return self._audit_skill(path, scanner_workers)
        except Exception as e:
            logger.error("Audit of %s failed: %s", path.name, e)
            return AuditReport(
                skill_name=path.name,
                skill_path=str(path),
                status=AuditStatus.FAILED,
                risk_level=RiskLevel.HIGH,
                strict=self.config.strict,
                error=str(e),
            )

    # -- helpers ---------------------------------------------------------------

    @staticmethod
    def _require_directory(path: str | Path) -> Path:
        path = Path(path)
        if not path.exists():
            raise SkillPathError(f"Path does not exist: {path}")
        if not path.is_dir():
            raise SkillPathError(f"Not a directory: {path}")
        return path

    def list_scanners(self) -> list[str]:
        return [scanner.get_name() for scanner in self.scanners]


def check_tools(runner: ToolRunner | None = None) -> dict[str, str | None]:
    """Map each external tool to its resolved path, or None when absent."""
    runner = runner or ToolRunner()
    return {tool: runner.which(tool) for tool in EXTERNAL_TOOLS.values()}


def audit_skill(
    skill_directory: str | Path,
    config: AuditConfig | None = None,
    catalog: RuleCatalog | None = None,
    runner: ToolRunner | None = None,
) -> AuditReport:
    """
    Convenience function to audit a single skill.

    Args:
        skill_directory: Path to skill directory
        config: Optional configuration
        catalog: Optional rule catalog
        runner: Optional process runner

    Returns:
        AuditReport
    """
    return SkillAuditor(config=config, catalog=catalog, runner=runner).audit(skill_directory)


def audit_collection(
    collection_directory: str | Path,
    config: AuditConfig | None = None,
    catalog: RuleCatalog | None = None,
    runner: ToolRunner | None = None,
) -> CollectionReport:
    """Convenience function to audit every skill in a collection directory."""
    return SkillAuditor(config=config, catalog=catalog, runner=runner).audit_all(collection_directory)
