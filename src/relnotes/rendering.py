"""Rendering of collated release notes into a Markdown changelog body."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Pattern, Sequence

from .config import HEADING_MODE_ALL, HEADING_MODE_AUTO, HeadingMode, Repository
from .filters import TagFilter
from .merging import DEFAULT_LIST_ITEM_PATTERN, compile_list_pattern, merge_notes
from .releases import Collation, TagEntry
from .utils import log_debug, log_warning, normalize_markdown

_PROMOTABLE_HEADING = re.compile(r"^#{3,5}(?= )", re.MULTILINE)


@dataclass
class RenderOptions:
    """Options controlling how notes are laid out."""

    headings: HeadingMode = HEADING_MODE_AUTO
    merge: bool = False
    list_pattern: str = DEFAULT_LIST_ITEM_PATTERN
    normalize: bool = False
    _list_re: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._list_re = compile_list_pattern(self.list_pattern)

    @property
    def list_item_pattern(self) -> Pattern[str]:
        return self._list_re


@dataclass
class LinkTable:
    """Reference-style link targets collected while rendering."""

    per_tag: dict[str, str] = field(default_factory=dict)
    per_repo_tag: dict[tuple[int, str], str] = field(default_factory=dict)

    def definitions(self, repositories: Sequence[Repository]) -> list[str]:
        """Return link definitions: canonical links first, then per repository."""
        lines = [f"[{tag}]: {url}" for tag, url in self.per_tag.items()]
        for repository in repositories:
            for (index, tag), url in self.per_repo_tag.items():
                if index == repository.index:
                    lines.append(f"[{repository.slug} {tag}]: {url}")
        return lines


def release_url(
    repository: Repository,
    tag: str,
    collation: Collation,
    tag_filter: TagFilter,
) -> str:
    """Return the compare URL for ``tag`` or, without a predecessor, its release page."""
    previous = collation.previous_tag(repository.index, tag)
    if previous is None or tag_filter.is_lower_bound(tag):
        return f"{repository.url}/releases/tag/{tag}"
    return f"{repository.url}/compare/{previous}...{tag}"


def promote_headings(note: str) -> str:
    """Add one ``#`` to level 3-5 headings so they nest below generated headings."""
    return _PROMOTABLE_HEADING.sub(lambda match: f"#{match.group(0)}", note)


def _render_tag(
    entry: TagEntry,
    repositories: Sequence[Repository],
    collation: Collation,
    links: LinkTable,
    *,
    options: RenderOptions,
    tag_filter: TagFilter,
    report_missing: bool,
) -> str:
    tag = entry.tag
    by_index = {repository.index: repository for repository in repositories}
    blocks: list[str] = []
    merge_sources: list[str] = []

    for index, note in entry.notes.items():
        repository = by_index[index]
        url = release_url(repository, tag, collation, tag_filter)
        canonical = links.per_tag.setdefault(tag, url)

        if note is None:
            continue
        if options.normalize:
            note = normalize_markdown(note)

        if options.merge:
            merge_sources.append(note)
            continue

        if options.headings == HEADING_MODE_ALL or not repository.is_primary:
            if url != canonical:
                blocks.append(f"### {repository.display_name} [{tag}][{repository.slug} {tag}]")
                links.per_repo_tag[(index, tag)] = url
            else:
                blocks.append(f"### {repository.display_name} {tag}")
        blocks.append(promote_headings(note) if len(repositories) > 1 else note)

    if merge_sources:
        blocks = [merge_notes(merge_sources, options.list_item_pattern)]

    # A lone contributor needs no attribution below the tag heading.
    contributors = entry.contributors()
    if options.headings == HEADING_MODE_AUTO and len(contributors) == 1 and len(blocks) == 2:
        del blocks[0]
        links.per_repo_tag.pop((contributors[0], tag), None)

    paragraphs = [f"## [{tag}] - {entry.date:%Y-%m-%d}"]
    if report_missing:
        missing = [
            f"> {repository.display_name} {tag} was not released"
            for repository in repositories
            if repository.report_missing and repository.index not in entry.notes
        ]
        if missing:
            paragraphs.append("\n".join(missing))
    paragraphs.extend(block for block in blocks if block)
    return "\n\n".join(paragraphs)


def render_changelog(
    collation: Collation,
    repositories: Sequence[Repository],
    *,
    options: Optional[RenderOptions] = None,
    tag_filter: Optional[TagFilter] = None,
) -> str:
    """Render the changelog body with ``\\n`` line endings.

    Returns an empty string when no tag is selected. Otherwise the body ends
    with the link definitions and a single trailing newline.
    """
    options = options or RenderOptions()
    tag_filter = tag_filter or TagFilter()
    links = LinkTable()
    sections: list[str] = []
    for tag in tag_filter.select(collation.ordered_tags()):
        entry = collation.entries[tag]
        sections.append(
            _render_tag(
                entry,
                repositories,
                collation,
                links,
                options=options,
                tag_filter=tag_filter,
                report_missing=bool(sections),
            )
        )
    for option, bound in (("--to", tag_filter.to_tag), ("--from", tag_filter.from_tag)):
        if bound and bound not in collation.entries:
            log_warning(f"{option} tag {bound} is not among the collated releases")
    log_debug(f"rendered {len(sections)} of {len(collation.entries)} tags")
    if not sections:
        return ""
    definitions = "\n".join(links.definitions(repositories))
    return "\n\n".join(sections) + "\n\n" + definitions + "\n"
