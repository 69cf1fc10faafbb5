"""Glob-based resolution of per-object S3 parameters.

This module provides:
- glob_match: Case-sensitive glob matching on forward-slash paths
- resolve_params: Merge the params of every rule matching a file

Glob syntax:
- ``*`` matches any run of characters inside one path segment
- ``?`` matches one character inside a segment
- ``[abc]`` / ``[!abc]`` character classes
- ``{a,b}`` alternatives (expanded before matching)
- ``**`` as a whole segment matches zero or more segments

Wildcards never match a leading ``.`` of a segment; spell the dot out
(``.well-known/*``) to target dotfiles.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from s3ferry.core.config import ONLY_FOR_STAGE_KEY, ParamRule
from s3ferry.core.paths import to_s3_path

# One path segment that does not start with a dot
_SEGMENT = r"(?!\.)[^/]+"


def _split_alternatives(body: str) -> list[str]:
    """Split a brace body on top-level commas."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\\" and i + 1 < len(body):
            current.append(body[i : i + 2])
            i += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        elif c == "," and depth == 0:
            parts.append("".join(current))
            current = []
            i += 1
            continue
        current.append(c)
        i += 1
    parts.append("".join(current))
    return parts


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into separate patterns.

    Groups without a top-level comma are kept literally.
    """
    depth = 0
    open_index = -1
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            if depth == 0:
                open_index = i
            depth += 1
        elif c == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                alternatives = _split_alternatives(pattern[open_index + 1 : i])
                if len(alternatives) > 1:
                    head, tail = pattern[:open_index], pattern[i + 1 :]
                    expanded: list[str] = []
                    for alternative in alternatives:
                        expanded.extend(expand_braces(head + alternative + tail))
                    return expanded
        i += 1
    return [pattern]


def _translate_segment(segment: str) -> str:
    """Translate one glob segment (no slashes) to a regex fragment."""
    out: list[str] = []
    i = 0
    n = len(segment)
    while i < n:
        c = segment[i]
        if c == "\\" and i + 1 < n:
            out.append(re.escape(segment[i + 1]))
            i += 2
        elif c == "*":
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            start = i + 1
            if start < n and segment[start] in "!^":
                start += 1
            if start < n and segment[start] == "]":
                start += 1
            end = segment.find("]", start)
            if end == -1:
                out.append(re.escape(c))
                i += 1
                continue
            body = segment[i + 1 : end]
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("[", "\\[")
            if body.startswith("]"):
                body = "\\" + body
            out.append(f"[^/{body}]" if negate else f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(c))
            i += 1

    fragment = "".join(out)
    if segment[:1] in ("*", "?", "["):
        fragment = r"(?!\.)" + fragment
    return fragment


def _translate(pattern: str) -> str:
    """Translate a brace-free glob to a regex matched against the full path."""
    parts: list[str | None] = []  # None stands for a ** segment
    for segment in pattern.split("/"):
        if segment == "**":
            if parts and parts[-1] is None:
                continue
            parts.append(None)
        else:
            parts.append(_translate_segment(segment))

    regex = ""
    last = len(parts) - 1
    for i, part in enumerate(parts):
        if part is None:
            if i == 0 and i == last:
                regex += f"{_SEGMENT}(?:/{_SEGMENT})*"
            elif i == last:
                # "dir/**" also matches "dir" itself
                regex = regex[:-1] + f"(?:/{_SEGMENT})*"
            else:
                regex += f"(?:{_SEGMENT}/)*"
        else:
            regex += part
            if i != last:
                regex += "/"
    return regex


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> tuple[re.Pattern[str], ...]:
    """Compile a glob pattern into one regex per brace alternative."""
    return tuple(re.compile(_translate(p)) for p in expand_braces(pattern))


def glob_match(relative_path: str, pattern: str) -> bool:
    """Check whether a path relative to the sync root matches a glob.

    The path is normalized to forward slashes first, so matching does not
    depend on the host path separator. Matching is case-sensitive.
    """
    path = to_s3_path(relative_path)
    return any(regex.fullmatch(path) for regex in compile_glob(pattern))


def resolve_params(
    relative_path: str,
    rules: Sequence[ParamRule] | None,
    stage: str | None = None,
    skip_unmatched: bool = False,
) -> dict[str, Any] | None:
    """Resolve the S3 parameters for a file.

    Every matching rule is merged in order, later rules replacing keys set
    by earlier ones. The OnlyForStage restriction of the last matching rule
    wins; a matching rule without it clears any earlier restriction.

    Args:
        relative_path: File path relative to the sync root.
        rules: Ordered param rules.
        stage: Active stage.
        skip_unmatched: Return None when no rule matched (metadata sync).

    Returns:
        The merged parameters without OnlyForStage, or None when the file
        must be skipped (stage mismatch, or unmatched with skip_unmatched).
    """
    if not rules:
        return None if skip_unmatched else {}

    params: dict[str, Any] = {}
    only_for_stage: str | None = None
    matched = False

    for rule in rules:
        if not glob_match(relative_path, rule.glob):
            continue
        matched = True
        params.update(rule.params)
        only_for_stage = rule.params.get(ONLY_FOR_STAGE_KEY) or None

    if skip_unmatched and not matched:
        return None

    params.pop(ONLY_FOR_STAGE_KEY, None)

    if only_for_stage and only_for_stage != stage:
        return None

    return params
