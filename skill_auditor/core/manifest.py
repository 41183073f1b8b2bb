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
SKILL.md manifest parsing.

The header is parsed with python-frontmatter; line numbers for the fields the
frontmatter rules report on are recovered from the raw header text, since the
YAML loader does not keep them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

import frontmatter
import yaml

from .exceptions import ManifestParseError

_DELIMITER = "---"
_TOP_LEVEL_KEY = re.compile(r"^(?P<key>[A-Za-z0-9_-]+)\s*:(?P<value>.*)$")
_BLOCK_ITEM = re.compile(r"^\s*-\s+(?P<item>.*)$")

ALLOWED_TOOLS_KEYS = ("allowed-tools", "allowed_tools")


@dataclass(frozen=True)
class ManifestField:
    """A header value with the 1-indexed SKILL.md line it was declared on."""

    value: str
    line: int


@dataclass
class SkillManifest:
    """Parsed SKILL.md: header fields with line numbers plus the raw body."""

    has_frontmatter: bool
    name: ManifestField | None = None
    description: ManifestField | None = None
    allowed_tools: list[ManifestField] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    key_lines: dict[str, int] = field(default_factory=dict)
    body: str = ""
    body_start_line: int = 1
    line_count: int = 0

    def line_of(self, key: str) -> int | None:
        """Line number of a top-level header key, or None when absent."""
        return self.key_lines.get(key)

    def body_lines(self):
        """Yield ``(line_number, text)`` for every body line."""
        for offset, line in enumerate(self.body.splitlines()):
            yield self.body_start_line + offset, line


def split_flow_sequence(inner: str) -> list[str]:
    """Split ``a, Bash(find,ls), b`` on commas outside parentheses."""
    items = []
    depth = 0
    current: list[str] = []
    for ch in inner:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    items.append("".join(current).strip())
    return [_unquote(item) for item in items if item]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_manifest(content: str) -> SkillManifest:
    """Parse SKILL.md *content*.

    Args:
        content: Full text of SKILL.md

    Returns:
        SkillManifest. ``has_frontmatter`` is False when the file does not
        start with a ``---`` line; the whole file is then the body.

    Raises:
        ManifestParseError: If the header is unterminated, is not valid YAML
            or is not a mapping.
    """
    if content.startswith("\ufeff"):
        content = content[1:]
    lines = content.splitlines()
    if not lines or lines[0].strip() != _DELIMITER:
        return SkillManifest(has_frontmatter=False, body=content, body_start_line=1, line_count=len(lines))

    close_idx = next((i for i in range(1, len(lines)) if lines[i].strip() == _DELIMITER), None)
    if close_idx is None:
        raise ManifestParseError("frontmatter block is not closed with '---'")

    try:
        post = frontmatter.loads(content)
    except yaml.YAMLError as e:
        raise ManifestParseError(f"invalid YAML in frontmatter: {e}") from e

    header_text = "\n".join(lines[1:close_idx])
    if header_text.strip() and not post.metadata:
        # python-frontmatter drops non-mapping headers silently
        raise ManifestParseError("frontmatter must be a mapping of key: value pairs")

    metadata = dict(post.metadata)
    key_lines = _index_keys(lines, close_idx)

    manifest = SkillManifest(
        has_frontmatter=True,
        metadata=metadata,
        key_lines=key_lines,
        body="\n".join(lines[close_idx + 1 :]),
        body_start_line=close_idx + 2,
        line_count=len(lines),
    )

    for key in ("name", "description"):
        if key in metadata:
            value = _scalar(metadata[key])
            if value:
                setattr(manifest, key, ManifestField(value, key_lines.get(key, 1)))

    for key in ALLOWED_TOOLS_KEYS:
        if key in metadata:
            manifest.allowed_tools = _allowed_tools(metadata[key], key, key_lines, lines, close_idx)
            break

    return manifest


def _index_keys(lines: list[str], close_idx: int) -> dict[str, int]:
    index: dict[str, int] = {}
    for i in range(1, close_idx):
        match = _TOP_LEVEL_KEY.match(lines[i])
        if match and match.group("key") not in index:
            index[match.group("key")] = i + 1
    return index


def _allowed_tools(
    value: Any, key: str, key_lines: dict[str, int], lines: list[str], close_idx: int
) -> list[ManifestField]:
    key_line = key_lines.get(key, 1)
    raw_value = ""
    match = _TOP_LEVEL_KEY.match(lines[key_line - 1]) if key_line > 1 else None
    if match:
        raw_value = match.group("value").strip()

    # Flow sequences are re-split from the raw text: YAML itself would break
    # "Bash(find,ls)" apart at the inner comma.
    if raw_value.startswith("[") and raw_value.endswith("]"):
        return [ManifestField(tool, key_line) for tool in split_flow_sequence(raw_value[1:-1])]

    if isinstance(value, str):
        return [ManifestField(tool, key_line) for tool in split_flow_sequence(value)]

    if isinstance(value, list):
        item_lines = []
        for i in range(key_line, close_idx):
            if _BLOCK_ITEM.match(lines[i]):
                item_lines.append(i + 1)
            elif _TOP_LEVEL_KEY.match(lines[i]):
                break
        tools = []
        for pos, item in enumerate(value):
            text = _scalar(item)
            if text:
                line = item_lines[pos] if pos < len(item_lines) else key_line
                tools.append(ManifestField(text, line))
        return tools

    text = _scalar(value)
    return [ManifestField(text, key_line)] if text else []
