"""Python-friendly facade for invoking relnotes functionality."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

from .cli import (
    CLIContext,
    build_document,
    build_tag_filter,
    collate,
    create_cli_context,
    generate_changelog,
    load_releases,
    run_tags,
)
from .cli._generate import ReleaseMap
from .config import Config
from .releases import Collation, ReleaseRecord


class Changelog:
    """High-level helper that mirrors the CLI commands for Python callers.

    Without an explicit ``config``, the configuration is loaded from
    ``config_path`` or from ``relnotes.yaml`` below ``root``.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        *,
        root: Path | str | None = None,
        config_path: Path | str | None = None,
        debug: bool = False,
    ) -> None:
        self._ctx = create_cli_context(
            root=Path(root) if root is not None else None,
            config=Path(config_path) if config_path is not None else None,
            debug=debug,
        )
        if config is not None:
            self._ctx.reset_config(config)

    @property
    def context(self) -> CLIContext:
        """Expose the underlying CLIContext for advanced scenarios."""

        return self._ctx

    @property
    def config(self) -> Config:
        return self._ctx.ensure_config()

    def fetch(self, *, refresh: bool = False) -> dict[int, list[ReleaseRecord]]:
        """Retrieve the releases of every configured repository."""

        return load_releases(self.config, refresh=refresh)

    def collate(self, releases: Optional[ReleaseMap] = None) -> Collation:
        """Collate releases into a tag timeline, fetching them when not given."""

        config = self.config
        if releases is None:
            releases = self.fetch()
        return collate(config, releases, build_tag_filter(config))

    def render(
        self,
        releases: Optional[ReleaseMap] = None,
        *,
        existing: Path | str | None = None,
    ) -> str:
        """Return the changelog document without writing it.

        With ``existing``, the header of that file is preserved the same way
        writing to it would.
        """

        if releases is None:
            releases = self.fetch()
        return build_document(
            self.config,
            releases,
            existing_path=Path(existing) if existing is not None else None,
        )

    def write(
        self,
        output: Path | str | None = None,
        *,
        releases: Optional[ReleaseMap] = None,
        refresh: bool = False,
    ) -> str:
        """Write the changelog to ``output`` (or the configured output, or stdout)."""

        config = self.config
        if output is not None:
            config = replace(config, output=Path(output))
        return generate_changelog(self._ctx, config, refresh=refresh, releases=releases)

    def tags(
        self,
        releases: Optional[ReleaseMap] = None,
        *,
        refresh: bool = False,
    ) -> list[list[str]]:
        """Print the tag table and return its rows."""

        return run_tags(self._ctx, self.config, refresh=refresh, releases=releases)
