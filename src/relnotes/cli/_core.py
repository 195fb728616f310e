"""Core CLI infrastructure: context, shared options, and the entry point."""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar

import click

from .. import __version__ as package_version
from ..config import (
    Config,
    build_repositories,
    default_config_path,
    load_config,
)
from ..utils import abort_on_user_interrupt, configure_logging, log_debug

F = TypeVar("F", bound=Callable[..., Any])

__all__ = [
    "CLIContext",
    "create_cli_context",
    "cli",
    "repository_options",
    "filter_options",
    "fetch_options",
    "apply_overrides",
    "DEFAULT_COMMAND",
    "VERSION_FLAGS",
    "_create_cli_group",
    "main",
]

VERSION_FLAGS = {"--version", "-V"}
DEFAULT_COMMAND = "generate"

# Group options that consume the following argument.
_GROUP_VALUE_OPTIONS = {"--config"}
_GROUP_FLAG_OPTIONS = {"--debug", "-d", "--help", "-h"}


def _resolve_cli_version() -> str:
    try:
        return metadata_version("relnotes")
    except PackageNotFoundError:
        return package_version


@dataclass
class CLIContext:
    """Shared command context."""

    root: Path
    config_path: Path
    config_explicit: bool = False
    debug: bool = False
    _config: Optional[Config] = None

    def ensure_config(self) -> Config:
        """Load the config file, or return defaults when there is none."""
        if self._config is None:
            if not self.config_path.exists():
                if self.config_explicit:
                    raise click.ClickException(f"Config file not found: {self.config_path}")
                log_debug(f"no config at {self.config_path}, using defaults")
                self._config = Config()
            else:
                try:
                    self._config = load_config(self.config_path)
                except ValueError as error:
                    raise click.ClickException(f"{self.config_path}: {error}") from error
        return self._config

    def reset_config(self, config: Config) -> None:
        self._config = config


def create_cli_context(
    *,
    root: Path | None = None,
    config: Optional[Path] = None,
    debug: bool = False,
) -> CLIContext:
    """Return a CLIContext using the same resolution logic as the CLI entry point."""

    configure_logging(debug)
    resolved_root = (root or Path(".")).resolve()
    config_path = config.resolve() if config else default_config_path(resolved_root)
    log_debug(f"using config path: {config_path}")
    return CLIContext(
        root=resolved_root,
        config_path=config_path,
        config_explicit=config is not None,
        debug=debug,
    )


def repository_options() -> Callable[[F], F]:
    """Shared repository argument and per-repository options.

    ``--name``, ``--releases`` and ``--missing`` may be given once per
    repository and apply by position.

    Used by: generate, tags, init
    """

    def decorator(f: F) -> F:
        f = click.option(
            "--missing",
            "-m",
            "missing",
            type=click.BOOL,
            multiple=True,
            help="Report releases missing from the repository (once per repository).",
        )(f)
        f = click.option(
            "--releases",
            "-r",
            "releases",
            type=click.BOOL,
            multiple=True,
            help=(
                "Include releases found in the repository (once per repository). "
                "Only the primary repository's releases are included by default."
            ),
        )(f)
        f = click.option(
            "--name",
            "-n",
            "names",
            multiple=True,
            metavar="NAME",
            help="Name to use instead of OWNER/REPO (once per repository).",
        )(f)
        return click.argument("repos", nargs=-1, metavar="[OWNER/REPO]...")(f)

    return decorator


def filter_options() -> Callable[[F], F]:
    """Shared tag selection options.

    Used by: generate, tags, init
    """

    def decorator(f: F) -> F:
        f = click.option("--to", "to_tag", metavar="TAG", help="Newest tag to include.")(f)
        f = click.option("--from", "from_tag", metavar="TAG", help="Oldest tag to include.")(f)
        f = click.option(
            "--exclude", metavar="REGEX", help="Skip tags matching this expression."
        )(f)
        f = click.option(
            "--include", metavar="REGEX", help="Only use tags matching this expression."
        )(f)
        return f

    return decorator


def fetch_options() -> Callable[[F], F]:
    """Shared options controlling release retrieval.

    Used by: generate, tags
    """

    def decorator(f: F) -> F:
        f = click.option(
            "--cache-ttl",
            metavar="DURATION",
            help="How long GitHub responses are cached (e.g. 1h, 30m).",
        )(f)
        f = click.option(
            "--refresh",
            is_flag=True,
            help="Flush cached GitHub responses and fetch releases again.",
        )(f)
        return f

    return decorator


def apply_overrides(
    base: Config,
    *,
    repos: Sequence[str] = (),
    names: Sequence[str] = (),
    releases: Sequence[bool] = (),
    missing: Sequence[bool] = (),
    **options: Any,
) -> Config:
    """Return ``base`` with explicitly given command-line values applied.

    Positional repositories replace the configured list. Without them, the
    per-repository options override the configured repositories by position.
    Options passed as None or as blank strings keep their configured value.
    """
    if repos:
        slugs: list[str] = list(repos)
        name_values: list[str | None] = list(names)
        release_values: list[bool | None] = list(releases)
        missing_values: list[bool | None] = list(missing)
    else:
        configured = base.repositories
        slugs = [repository.slug for repository in configured]
        name_values = [
            names[index] if index < len(names) else repository.display_name
            for index, repository in enumerate(configured)
        ]
        release_values = [
            releases[index] if index < len(releases) else repository.include_releases
            for index, repository in enumerate(configured)
        ]
        missing_values = [
            missing[index] if index < len(missing) else repository.report_missing
            for index, repository in enumerate(configured)
        ]
    try:
        repositories = build_repositories(
            slugs, names=name_values, releases=release_values, missing=missing_values
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="'OWNER/REPO'") from exc

    values: dict[str, Any] = {}
    for key, value in options.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        values[key] = value
    if "output" in values:
        values["output"] = Path(values["output"])
    return replace(base, repositories=repositories, **values)


# Placeholder for the cli group - created once all commands are defined.
cli: click.Group = None  # type: ignore[assignment]


def _create_cli_group() -> click.Group:
    """Create the main CLI group. Called after all commands are defined."""

    @click.group(context_settings={"help_option_names": ["-h", "--help"]})
    @click.option(
        "--config",
        type=click.Path(path_type=Path, dir_okay=False),
        help="Path to an explicit relnotes config YAML file.",
    )
    @click.option(
        "--debug",
        "-d",
        is_flag=True,
        help="Enable debug logging.",
    )
    @click.pass_context
    def _cli(
        ctx: click.Context,
        config: Optional[Path],
        debug: bool,
    ) -> None:
        """Generate a changelog from GitHub release notes."""

        ctx.obj = create_cli_context(config=config, debug=debug)

    return click.version_option(version=_resolve_cli_version())(_cli)


def _insert_default_command(args: list[str], commands: Sequence[str]) -> list[str]:
    """Insert the default command before the first argument that is not a group option."""
    index = 0
    while index < len(args):
        arg = args[index]
        if arg in _GROUP_VALUE_OPTIONS:
            index += 2
            continue
        if arg in _GROUP_FLAG_OPTIONS or arg.split("=", 1)[0] in _GROUP_VALUE_OPTIONS:
            if arg in {"--help", "-h"}:
                return args
            index += 1
            continue
        break
    if index < len(args) and args[index] in commands:
        return args
    return args[:index] + [DEFAULT_COMMAND] + args[index:]


def main(argv: list[str] | None = None) -> int:
    """Entry point for console_scripts."""
    # Import cli here to avoid circular import at module load time
    from . import cli

    args = list(argv) if argv is not None else list(sys.argv[1:])

    if any(flag in args for flag in VERSION_FLAGS):
        click.echo(_resolve_cli_version())
        return 0

    args = _insert_default_command(args, list(cli.commands))

    try:
        result = cli.main(args=args, prog_name="relnotes", standalone_mode=False)
    except click.ClickException as exc:
        exc.show(file=sys.stderr)
        exit_code = getattr(exc, "exit_code", 1)
        return exit_code if isinstance(exit_code, int) else 1
    except (KeyboardInterrupt, click.exceptions.Abort) as exc:
        try:
            abort_on_user_interrupt(exc)
        except click.exceptions.Exit as exit_exc:
            exit_code = getattr(exit_exc, "exit_code", 130)
            return exit_code if isinstance(exit_code, int) else 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    return result if isinstance(result, int) else 0
