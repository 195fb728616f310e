"""Tags command listing the collated tag timeline."""

from __future__ import annotations

from typing import Optional

import click
from rich.table import Table

from ..config import Config
from ..filters import TagFilter
from ..releases import Collation
from ..utils import console, log_info
from ._core import (
    CLIContext,
    apply_overrides,
    fetch_options,
    filter_options,
    repository_options,
)
from ._generate import ReleaseMap, build_tag_filter, collate, load_releases

__all__ = [
    "NOTES_MARK",
    "EMPTY_MARK",
    "tag_rows",
    "run_tags",
    "tags_cmd",
]

NOTES_MARK = "✔"
EMPTY_MARK = "○"


def tag_rows(config: Config, collation: Collation, tag_filter: TagFilter) -> list[list[str]]:
    """Return one row per collated tag, newest first.

    Repository cells show whether the repository released the tag with notes,
    without notes, or not at all. The last cell marks tags that would be
    rendered.
    """
    ordered = collation.ordered_tags()
    selected = set(tag_filter.select(ordered))
    rows: list[list[str]] = []
    for tag in ordered:
        entry = collation.entries[tag]
        row = [tag, f"{entry.date:%Y-%m-%d}"]
        for repository in config.repositories:
            if repository.index not in entry.notes:
                row.append("")
            elif entry.notes[repository.index] is None:
                row.append(EMPTY_MARK)
            else:
                row.append(NOTES_MARK)
        row.append(NOTES_MARK if tag in selected else "")
        rows.append(row)
    return rows


def run_tags(
    ctx: CLIContext,
    config: Config,
    *,
    refresh: bool = False,
    releases: Optional[ReleaseMap] = None,
) -> list[list[str]]:
    """Python wrapper for listing tags that mirrors CLI behavior."""

    tag_filter = build_tag_filter(config)
    if releases is None:
        releases = load_releases(config, refresh=refresh)
    rows = tag_rows(config, collate(config, releases, tag_filter), tag_filter)
    if not rows:
        log_info("no releases found.")
        return rows

    table = Table(box=None, padding=(0, 2, 0, 0), show_header=True)
    table.add_column("TAG", style="cyan")
    table.add_column("DATE", style="dim")
    for repository in config.repositories:
        table.add_column(repository.display_name.upper(), justify="center")
    table.add_column("WINDOW", justify="center", style="green")
    for row in rows:
        table.add_row(*row)
    console.print(table)
    return rows


@click.command("tags")
@repository_options()
@filter_options()
@fetch_options()
@click.pass_obj
def tags_cmd(
    ctx: CLIContext,
    repos: tuple[str, ...],
    names: tuple[str, ...],
    releases: tuple[bool, ...],
    missing: tuple[bool, ...],
    include: Optional[str],
    exclude: Optional[str],
    from_tag: Optional[str],
    to_tag: Optional[str],
    refresh: bool,
    cache_ttl: Optional[str],
) -> None:
    """List collated tags and which repositories released them."""

    config = apply_overrides(
        ctx.ensure_config(),
        repos=repos,
        names=names,
        releases=releases,
        missing=missing,
        include=include,
        exclude=exclude,
        from_tag=from_tag,
        to_tag=to_tag,
        cache_ttl=cache_ttl,
    )
    run_tags(ctx, config, refresh=refresh)
