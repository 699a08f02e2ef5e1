"""Markdown parsing utilities for backlinks and headings."""

import re
from typing import Any
from urllib.parse import unquote

# Match [[target]], [[target|display]], [[target#section]], [[target#section|display]]
WIKILINK_PATTERN = re.compile(r"\[\[([^\]|#]+)(?:#[^\]|]*)?(?:\|[^\]]+)?\]\]")

# Match [display](target.md)
MARKDOWN_LINK_PATTERN = re.compile(r"\[[^\]]*\]\(([^)]+)\)")

MD_SUFFIX = ".md"
FRONTMATTER_FENCE = "---"


def strip_md_suffix(target: str) -> str:
    if target.endswith(MD_SUFFIX):
        return target[: -len(MD_SUFFIX)]
    return target


def extract_link_target(value: Any) -> str | None:
    """Extract the note a backlink property points at.

    Accepts, in priority order:
    - wiki-links: "[[Target]]", "[[Target|Alias]]", "[[Target#Heading]]"
    - markdown links: "[Alias](Target.md)" (URL-escaped paths are decoded)
    - bare text: "Target"

    An unquoted `parent: [[Target]]` reaches us from YAML as a nested
    single-item list, so one-element lists are unwrapped first.

    Returns None for empty or non-string values.
    """
    while isinstance(value, list) and len(value) == 1:
        value = value[0]

    if not isinstance(value, str):
        return None

    link = value.strip()
    if not link:
        return None

    wiki = WIKILINK_PATTERN.search(link)
    if wiki:
        return wiki.group(1).strip() or None

    md = MARKDOWN_LINK_PATTERN.search(link)
    if md:
        return strip_md_suffix(unquote(md.group(1).strip())) or None

    return link


def extract_link_targets(values: Any) -> list[str]:
    """Extract targets from a list of backlinks, dropping unusable entries."""
    if not isinstance(values, list):
        return []

    result = []
    for entry in values:
        target = extract_link_target(entry)
        if target:
            result.append(target)
    return result


def _body_lines(content: str) -> list[str]:
    """Lines after a leading `---` frontmatter block, if the block is closed."""
    lines = content.split("\n")
    if not lines or lines[0].strip() != FRONTMATTER_FENCE:
        return lines
    for index in range(1, len(lines)):
        if lines[index].strip() in (FRONTMATTER_FENCE, "..."):
            return lines[index + 1:]
    return lines


def first_heading(content: str) -> str | None:
    """Return the text of the first level-1 heading, if any.

    A leading frontmatter block is skipped, so YAML comments are never
    mistaken for headings.
    """
    in_fence = False
    for line in _body_lines(content):
        stripped = line.strip()
        if stripped.startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        if stripped.startswith("# "):
            heading = stripped[2:].strip()
            if heading:
                return heading
    return None
