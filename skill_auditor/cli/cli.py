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

"""Command-line interface for the Skill Auditor."""

from __future__ import annotations

import argparse
import logging
import sys

from ..config.config import load_config
from ..config.constants import SkillAuditorConstants
from ..core.exceptions import CollectionPathError, SkillAuditorError
from ..core.orchestrator import SkillAuditor, check_tools
from ..core.reporters.json_reporter import JSONReporter
from ..core.reporters.pretty_reporter import PrettyReporter
from ..core.reporters.sarif_reporter import SARIFReporter
from ..core.rule_catalog import RuleDefinition, load_default_catalog
from ..core.scanners.factory import EXTERNAL_TOOLS
from ..core.verdict import exit_code

logger = logging.getLogger("skill_auditor.cli")

EXIT_ERROR = SkillAuditorConstants.EXIT_ERROR


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _build_auditor(args: argparse.Namespace) -> SkillAuditor:
    config = load_config(args.config)
    if args.strict:
        config = config.with_strict(True)
    return SkillAuditor(config=config, catalog=load_default_catalog())


def _format_output(args: argparse.Namespace, report) -> str:
    fmt = getattr(args, "format", "pretty")
    if fmt == "json":
        return JSONReporter(pretty=True).generate_report(report)
    if fmt == "sarif":
        return SARIFReporter(catalog=load_default_catalog()).generate_report(report)
    return PrettyReporter().generate_report(report)


def _write_output(args: argparse.Namespace, output: str) -> None:
    """Write *output* to a file or stdout."""
    if args.output:
        with open(args.output, "w", encoding="utf-8") as fh:
            fh.write(output)
            fh.write("\n")
        print(f"Report saved to: {args.output}", file=sys.stderr)
    else:
        print(output)


def _print_error(message: object) -> None:
    print(f"Error: {message}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def audit_command(args: argparse.Namespace) -> int:
    """Handle the ``audit`` command for a single skill."""
    try:
        auditor = _build_auditor(args)
        report = auditor.audit(args.path)
    except CollectionPathError as e:
        _print_error(e)
        print("Or audit skills individually:", file=sys.stderr)
        for skill_dir in e.skill_dirs:
            print(f"  skill-auditor audit {skill_dir}", file=sys.stderr)
        return EXIT_ERROR
    except SkillAuditorError as e:
        _print_error(e)
        return EXIT_ERROR

    for name, reason in report.skipped_scanners:
        logger.info("Skipped %s: %s", name, reason)
    _write_output(args, _format_output(args, report))
    return exit_code(report)


def audit_all_command(args: argparse.Namespace) -> int:
    """Handle the ``audit-all`` command for a collection of skills."""
    try:
        auditor = _build_auditor(args)
        collection = auditor.audit_all(args.path)
    except SkillAuditorError as e:
        _print_error(e)
        return EXIT_ERROR

    for report in collection.reports:
        if report.error is not None:
            print(f"Warning: audit of {report.skill_name} failed: {report.error}", file=sys.stderr)
    _write_output(args, _format_output(args, collection))
    return exit_code(collection)


def list_rules_command(args: argparse.Namespace) -> int:
    """Handle the ``list-rules`` command."""
    try:
        catalog = load_default_catalog()
    except SkillAuditorError as e:
        _print_error(e)
        return EXIT_ERROR

    rules = catalog.for_scanner(args.scanner) if args.scanner else catalog.all()
    if args.scanner and not rules:
        _print_error(f"No rules for scanner '{args.scanner}' (known: {', '.join(catalog.scanners())})")
        return EXIT_ERROR

    print(f"{'RULE':<40} {'SEVERITY':<9} {'SCANNER':<16} DESCRIPTION")
    for rule in rules:
        print(f"{rule.id:<40} {rule.severity.value:<9} {rule.scanner:<16} {rule.description}")
    print(f"\n{len(rules)} rules")
    return 0


def _explain(rule: RuleDefinition) -> str:
    lines = [
        "=" * 60,
        f"Rule: {rule.id}",
        "=" * 60,
        f"Severity:    {rule.severity.value}",
        f"Category:    {rule.category}",
        f"Scanner:     {rule.scanner}",
        f"Matcher:     {rule.matcher_kind}",
        "",
        f"Description: {rule.description}",
        f"Remediation: {rule.remediation}",
    ]
    if rule.matcher_kind == "external":
        lines.append("")
        lines.append(f"Reported by the external tool '{EXTERNAL_TOOLS.get(rule.scanner, rule.scanner)}'.")
    return "\n".join(lines)


def explain_command(args: argparse.Namespace) -> int:
    """Handle the ``explain`` command."""
    try:
        catalog = load_default_catalog()
    except SkillAuditorError as e:
        _print_error(e)
        return EXIT_ERROR

    rule = catalog.lookup(args.rule_id)
    if rule is None:
        _print_error(f"Unknown rule '{args.rule_id}'. Run 'skill-auditor list-rules' to see all rules.")
        return EXIT_ERROR
    print(_explain(rule))
    return 0


def check_tools_command(_args: argparse.Namespace) -> int:
    """Handle the ``check-tools`` command."""
    available = check_tools()
    print("External tools:\n")
    for scanner, tool in EXTERNAL_TOOLS.items():
        path = available.get(tool)
        tag = "[OK]" if path else "[MISSING]"
        detail = path or "not found on PATH; the scanner will be skipped"
        print(f"  {tag:<10} {tool:<12} ({scanner}) {detail}")
    return 0


# ---------------------------------------------------------------------------
# Shared argparse helpers
# ---------------------------------------------------------------------------


def _add_common_audit_flags(parser: argparse.ArgumentParser) -> None:
    """Add flags shared between ``audit`` and ``audit-all``."""
    parser.add_argument(
        "--format",
        choices=["pretty", "json", "sarif"],
        default="pretty",
        help="Output format (default: pretty). Use 'sarif' for GitHub Code Scanning.",
    )
    parser.add_argument("--output", "-o", help="Output file path")
    parser.add_argument("--strict", action="store_true", help="Fail on warnings as well as errors")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help=f"Configuration file (default: ./{SkillAuditorConstants.DEFAULT_CONFIG_FILENAME} "
        f"or ${SkillAuditorConstants.CONFIG_ENV_VAR})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on stderr")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog=SkillAuditorConstants.TOOL_NAME,
        description="Skill Auditor - Security auditor for agent skill directories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  skill-auditor audit ./my-skill
  skill-auditor audit ./my-skill --format sarif -o results.sarif
  skill-auditor audit-all ./skills --strict
  skill-auditor list-rules --scanner bash_patterns
  skill-auditor explain bash/CAT-A1
  skill-auditor check-tools

Exit codes: 0 pass, 1 audit failed, 2 runtime or usage error.
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SkillAuditorConstants.VERSION}")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # -- audit -------------------------------------------------------------
    audit_p = subparsers.add_parser("audit", help="Audit a single skill directory")
    audit_p.add_argument("path", help="Path to skill directory")
    _add_common_audit_flags(audit_p)

    # -- audit-all ---------------------------------------------------------
    audit_all_p = subparsers.add_parser("audit-all", help="Audit every skill in a collection directory")
    audit_all_p.add_argument("path", help="Directory containing skill directories")
    _add_common_audit_flags(audit_all_p)

    # -- list-rules --------------------------------------------------------
    lr_p = subparsers.add_parser("list-rules", help="List all rules")
    lr_p.add_argument("--scanner", help="Only list rules of this scanner")

    # -- explain -----------------------------------------------------------
    ex_p = subparsers.add_parser("explain", help="Show details for one rule")
    ex_p.add_argument("rule_id", help="Rule id, e.g. bash/CAT-A1")

    # -- check-tools -------------------------------------------------------
    subparsers.add_parser("check-tools", help="Report which external tools are installed")

    # -- dispatch ----------------------------------------------------------
    args = parser.parse_args(argv)
    _configure_logging(args)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    dispatch = {
        "audit": audit_command,
        "audit-all": audit_all_command,
        "list-rules": list_rules_command,
        "explain": explain_command,
        "check-tools": check_tools_command,
    }
    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
