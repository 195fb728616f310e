"""The generate command and the pipeline it drives."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

import click

from ..config import HEADING_MODE_CHOICES, Config
from ..filters import TagFilter
from ..github import fetch_all_releases
from ..output import compose_document, read_existing, write_document
from ..releases import Collation, ReleaseRecord, collate_releases
from ..rendering import RenderOptions, render_changelog
from ..utils import configure_logging, log_success
from ._core import (
    CLIContext,
    apply_overrides,
    fetch_options,
    filter_options,
    repository_options,
)

__all__ = [
    "build_tag_filter",
    "build_render_options",
    "load_releases",
    "collate",
    "build_document",
    "generate_changelog",
    "generate_cmd",
]

ReleaseMap = Mapping[int, Sequence[ReleaseRecord]]


def build_tag_filter(config: Config) -> TagFilter:
    """Compile the configured tag filter, reporting bad patterns as usage errors."""
    try:
        return TagFilter(
            include=config.include,
            exclude=config.exclude,
            from_tag=config.from_tag,
            to_tag=config.to_tag,
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def build_render_options(config: Config) -> RenderOptions:
    try:
        return RenderOptions(
            headings=config.headings,
            merge=config.merge,
            list_pattern=config.list_pattern,
            normalize=config.normalize,
        )
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def _require_repositories(config: Config) -> None:
    if not config.repositories:
        raise click.UsageError(
            "Provide at least one repository (OWNER/REPO) or configure 'repositories' "
            "in relnotes.yaml."
        )


def load_releases(config: Config, *, refresh: bool = False) -> dict[int, list[ReleaseRecord]]:
    """Fetch releases for every configured repository, in order."""
    _require_repositories(config)
    try:
        return fetch_all_releases(
            config.repositories, cache_ttl=config.cache_ttl, refresh=refresh
        )
    except (RuntimeError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def collate(config: Config, releases: ReleaseMap, tag_filter: TagFilter) -> Collation:
    return collate_releases(config.repositories, releases, tag_filter)


def build_document(
    config: Config,
    releases: ReleaseMap,
    *,
    existing_path: Optional[Path] = None,
    tag_filter: Optional[TagFilter] = None,
    options: Optional[RenderOptions] = None,
) -> str:
    """Render the complete document for ``releases`` without writing it."""
    tag_filter = tag_filter or build_tag_filter(config)
    options = options or build_render_options(config)
    collation = collate(config, releases, tag_filter)
    body = render_changelog(
        collation, config.repositories, options=options, tag_filter=tag_filter
    )
    existing = read_existing(existing_path) if existing_path is not None else None
    return compose_document(body, existing, preamble=config.preamble)


def generate_changelog(
    ctx: CLIContext,
    config: Config,
    *,
    refresh: bool = False,
    releases: Optional[ReleaseMap] = None,
) -> str:
    """Python wrapper for changelog generation that mirrors CLI behavior.

    Patterns are validated before anything is fetched, and the target is only
    written once the whole document has been rendered.
    """
    _require_repositories(config)
    tag_filter = build_tag_filter(config)
    options = build_render_options(config)
    if releases is None:
        releases = load_releases(config, refresh=refresh)
    document = build_document(
        config,
        releases,
        existing_path=config.output,
        tag_filter=tag_filter,
        options=options,
    )
    try:
        write_document(document, config.output)
    except OSError as exc:
        raise click.ClickException(f"failed to write {config.output}: {exc}") from exc
    if config.output is not None:
        log_success(f"wrote changelog to {config.output}")
    return document


@click.command("generate")
@repository_options()
@click.option(
    "--headings",
    "-H",
    type=click.Choice(HEADING_MODE_CHOICES),
    default=None,
    help=(
        "Headings to insert above release notes. 'auto' (default) adds headings above "
        "notes from repositories other than the primary one unless only one repository "
        "contributed; 'secondary' adds them for every secondary repository; 'all' adds "
        "them for every repository."
    ),
)
@click.option(
    "--merge/--no-merge",
    default=None,
    help="Merge release notes from all repositories into de-duplicated lists.",
)
@click.option(
    "--list-pattern",
    metavar="REGEX",
    help="Expression recognizing list items when merging.",
)
@click.option(
    "--normalize/--no-normalize",
    default=None,
    help="Reformat release notes with mdformat before rendering.",
)
@filter_options()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Write output to a file. Content before the first version heading ('## [') is preserved.",
)
@click.option(
    "--preamble/--no-preamble",
    default=None,
    help="Start new documents with the default changelog preamble.",
)
@fetch_options()
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors.")
@click.pass_obj
def generate_cmd(
    ctx: CLIContext,
    repos: tuple[str, ...],
    names: tuple[str, ...],
    releases: tuple[bool, ...],
    missing: tuple[bool, ...],
    headings: Optional[str],
    merge: Optional[bool],
    list_pattern: Optional[str],
    normalize: Optional[bool],
    include: Optional[str],
    exclude: Optional[str],
    from_tag: Optional[str],
    to_tag: Optional[str],
    output: Optional[Path],
    preamble: Optional[bool],
    refresh: bool,
    cache_ttl: Optional[str],
    quiet: bool,
) -> None:
    """Generate a changelog from GitHub release notes.

    The first repository is the primary repository.
    """
    if quiet:
        configure_logging(debug=ctx.debug, quiet=True)
    config = apply_overrides(
        ctx.ensure_config(),
        repos=repos,
        names=names,
        releases=releases,
        missing=missing,
        headings=headings,
        merge=merge,
        list_pattern=list_pattern,
        normalize=normalize,
        include=include,
        exclude=exclude,
        from_tag=from_tag,
        to_tag=to_tag,
        output=output,
        preamble=preamble,
        cache_ttl=cache_ttl,
    )
    generate_changelog(ctx, config, refresh=refresh)
