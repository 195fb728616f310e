"""Init command writing a starter relnotes.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..config import HEADING_MODE_CHOICES, Config, save_config
from ..utils import log_info, log_success
from ._core import CLIContext, apply_overrides, filter_options, repository_options

__all__ = [
    "write_initial_config",
    "init_cmd",
]


def write_initial_config(ctx: CLIContext, config: Config, *, force: bool = False) -> Path:
    """Python wrapper for writing a configuration file that mirrors CLI behavior."""

    path = ctx.config_path
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists; use --force to overwrite it.")
    if not config.repositories:
        log_info("no repositories given; add them under 'repositories' before generating.")
    save_config(config, path)
    ctx.reset_config(config)
    log_success(f"wrote configuration to {path}")
    return path


@click.command("init")
@repository_options()
@click.option(
    "--headings",
    "-H",
    type=click.Choice(HEADING_MODE_CHOICES),
    default=None,
    help="Headings to insert above release notes.",
)
@click.option(
    "--merge/--no-merge",
    default=None,
    help="Merge release notes from all repositories into de-duplicated lists.",
)
@filter_options()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Changelog file to write by default.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file.")
@click.pass_obj
def init_cmd(
    ctx: CLIContext,
    repos: tuple[str, ...],
    names: tuple[str, ...],
    releases: tuple[bool, ...],
    missing: tuple[bool, ...],
    headings: Optional[str],
    merge: Optional[bool],
    include: Optional[str],
    exclude: Optional[str],
    from_tag: Optional[str],
    to_tag: Optional[str],
    output: Optional[Path],
    force: bool,
) -> None:
    """Write a relnotes.yaml for the given repositories."""

    config = apply_overrides(
        Config(),
        repos=repos,
        names=names,
        releases=releases,
        missing=missing,
        headings=headings,
        merge=merge,
        include=include,
        exclude=exclude,
        from_tag=from_tag,
        to_tag=to_tag,
        output=output,
    )
    write_initial_config(ctx, config, force=force)
