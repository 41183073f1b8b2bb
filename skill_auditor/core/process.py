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
External process execution for the tool-wrapper scanners.

ToolRunner is the single seam between the auditor and external binaries, so
tests can substitute a fake runner and never need shellcheck, gitleaks or
semgrep installed.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ToolUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished external process."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


class ToolRunner:
    """Locate and run external binaries with a hard deadline."""

    def which(self, name: str) -> str | None:
        """Return the absolute path of *name* on PATH, or None."""
        return shutil.which(name)

    def is_available(self, name: str) -> bool:
        return self.which(name) is not None

    def run(
        self,
        args: list[str],
        timeout: float,
        cwd: str | Path | None = None,
        timeout_reason: str | None = None,
    ) -> ProcessResult:
        """Run *args* and wait at most *timeout* seconds.

        A process still running at the deadline is killed and abandoned.

        Args:
            args: Command line; ``args[0]`` is the binary name
            timeout: Deadline in seconds
            cwd: Working directory for the child
            timeout_reason: Skip reason to report when the deadline passes

        Returns:
            ProcessResult for a process that exited on its own

        Raises:
            ToolUnavailableError: If the binary cannot be started or the
                deadline passed.
        """
        tool = args[0]
        logger.debug("Running %s (timeout %ss)", " ".join(args), timeout)
        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
                stdin=subprocess.DEVNULL,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolUnavailableError(tool, f"{tool} not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            # subprocess.run kills the child before re-raising
            logger.warning("%s exceeded its %ss deadline and was killed", tool, timeout)
            raise ToolUnavailableError(tool, timeout_reason or f"{tool} timed out after {timeout:g}s") from e

        return ProcessResult(completed.returncode, completed.stdout or "", completed.stderr or "")
