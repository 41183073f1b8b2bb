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
JSON format reporter.

Output is fully deterministic (sorted findings, no timestamps) so two runs over
an unchanged skill produce identical bytes.
"""

import json

from ..models import AuditReport, CollectionReport


class JSONReporter:
    """Generates JSON format reports."""

    def __init__(self, pretty: bool = True):
        """
        Initialize JSON reporter.

        Args:
            pretty: If True, format JSON with indentation
        """
        self.pretty = pretty

    def generate_report(self, data: AuditReport | CollectionReport) -> str:
        """
        Generate JSON report.

        Args:
            data: AuditReport or CollectionReport object

        Returns:
            JSON string
        """
        report_dict = data.to_dict()
        if self.pretty:
            return json.dumps(report_dict, indent=2, ensure_ascii=False)
        return json.dumps(report_dict, ensure_ascii=False)

    def save_report(self, data: AuditReport | CollectionReport, output_path: str):
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.generate_report(data))
