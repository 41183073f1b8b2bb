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
Dangerous shell pattern scanner.

Applies the ``bash/*`` pattern rules to every shell script in the skill.
Outbound HTTP matches are dropped when every URL on the line points at an
allowlisted domain.
"""

from __future__ import annotations

from .base import PatternScanner


class BashPatternScanner(PatternScanner):
    """Detects remote code execution, credential access and other risky shell usage."""

    name = "bash_patterns"
    description = "Dangerous shell patterns (RCE, credentials, destructive commands)"
    extensions = ("sh", "bash", "zsh")
    skip_comments = True
    read_error_rule = "bash/read-error"
