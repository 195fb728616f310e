"""CLI package for relnotes.

This package contains the modular CLI implementation:
- _core.py: CLIContext, shared options, main entry point
- _generate.py: generate command and the fetch/collate/render pipeline
- _tags.py: tags command
- _init.py: init command
"""

from __future__ import annotations

# Re-export core types and utilities
from ._core import (
    CLIContext,
    DEFAULT_COMMAND,
    VERSION_FLAGS,
    apply_overrides,
    create_cli_context,
    fetch_options,
    filter_options,
    repository_options,
    _create_cli_group,
    main,
)

# Re-export generate command
from ._generate import (
    build_document,
    build_render_options,
    build_tag_filter,
    collate,
    generate_changelog,
    generate_cmd,
    load_releases,
)

# Re-export tags command
from ._tags import (
    run_tags,
    tag_rows,
    tags_cmd,
)

# Re-export init command
from ._init import (
    init_cmd,
    write_initial_config,
)

# Create the main CLI group
cli = _create_cli_group()

# Register all commands with the cli group
cli.add_command(generate_cmd)
cli.add_command(tags_cmd)
cli.add_command(init_cmd)


__all__ = [
    # Core
    "cli",
    "main",
    "CLIContext",
    "DEFAULT_COMMAND",
    "VERSION_FLAGS",
    "apply_overrides",
    "create_cli_context",
    "fetch_options",
    "filter_options",
    "repository_options",
    # Generate
    "build_document",
    "build_render_options",
    "build_tag_filter",
    "collate",
    "generate_changelog",
    "generate_cmd",
    "load_releases",
    # Tags
    "run_tags",
    "tag_rows",
    "tags_cmd",
    # Init
    "init_cmd",
    "write_initial_config",
]
