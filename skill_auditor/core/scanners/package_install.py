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
Package install scanner.

Flags package-manager invocations that do not pin a registry or version, and
``--registry`` URLs whose host is not in the registry allowlist.
"""

from __future__ import annotations

from .base import PatternScanner


class PackageInstallScanner(PatternScanner):
    name = "package_install"
    description = "Unpinned or unapproved package installs"
    extensions = ("sh", "bash", "zsh")
    skip_comments = True
    read_error_rule = "pkg/read-error"
