"""Merging and de-duplication of Markdown lists across release notes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern, Union

from .utils import normalize_newlines

DEFAULT_LIST_ITEM_PATTERN = r"^\s*(?:[-*+]|\d+[.)])\s+"

_HEADING_PATTERN = re.compile(r"^#{1,6}\s+\S")
_BLOCK_SEPARATOR = re.compile(r"\n[ \t]*\n")


@dataclass
class _ListGroup:
    """Items collected under one heading (or none)."""

    heading: Optional[str]
    items: list[str] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)

    def add(self, item: str) -> None:
        key = " ".join(item.split())
        if key in self.seen:
            return
        self.seen.add(key)
        self.items.append(item)

    def render(self) -> str:
        items = "\n".join(self.items)
        if self.heading is None:
            return items
        return f"{self.heading}\n\n{items}"


def compile_list_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    """Compile a list-item pattern, reporting invalid expressions as ValueError."""
    if not isinstance(pattern, str):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"invalid list pattern {pattern!r}: {exc}") from exc


def _split_items(lines: list[str], pattern: Pattern[str]) -> tuple[list[str], list[str]]:
    """Split a block into leading prose lines and list items with continuations."""
    prose: list[str] = []
    items: list[list[str]] = []
    for line in lines:
        if pattern.match(line):
            items.append([line])
        elif items:
            items[-1].append(line)
        else:
            prose.append(line)
    return prose, ["\n".join(item) for item in items]


def merge_notes(
    notes: Iterable[str],
    pattern: Union[str, Pattern[str]] = DEFAULT_LIST_ITEM_PATTERN,
) -> str:
    """Concatenate notes and merge their list items into de-duplicated lists.

    Prose blocks are kept in their original order. List items are pulled out
    of their surrounding paragraphs; items introduced by a heading-only block
    are grouped under that heading, everything else forms one list. Items are
    de-duplicated on their whitespace-normalized text, keeping the first
    occurrence. The lists follow the prose.
    """
    compiled = compile_list_pattern(pattern)
    text = "\n\n".join(
        stripped for stripped in (normalize_newlines(note).strip() for note in notes) if stripped
    )
    if not text:
        return ""

    prose: list[str] = []
    groups: dict[Optional[str], _ListGroup] = {}
    current: Optional[_ListGroup] = None
    # Heading-only block that may introduce the next list.
    pending_heading: Optional[str] = None

    for block in _BLOCK_SEPARATOR.split(text):
        lines = block.split("\n")
        leading, items = _split_items(lines, compiled)

        if not items:
            current = None
            if len(lines) == 1 and _HEADING_PATTERN.match(lines[0]):
                pending_heading = lines[0].rstrip()
            else:
                pending_heading = None
            prose.append(block)
            continue

        if leading:
            prose.append("\n".join(leading))
            group_key: Optional[str] = None
        elif pending_heading is not None:
            prose.pop()
            group_key = pending_heading
        elif current is not None:
            group_key = current.heading
        else:
            group_key = None
        pending_heading = None

        current = groups.get(group_key)
        if current is None:
            current = groups[group_key] = _ListGroup(group_key)
        for item in items:
            current.add(item)

    if not groups:
        return text

    parts = list(prose)
    if None in groups:
        parts.append(groups[None].render())
    parts.extend(group.render() for key, group in groups.items() if key is not None)
    return "\n\n".join(parts)
