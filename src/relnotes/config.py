"""Configuration helpers for relnotes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, MutableMapping, Sequence, cast

import yaml

from .merging import DEFAULT_LIST_ITEM_PATTERN

HeadingMode = Literal["auto", "secondary", "all"]
CONFIG_RELATIVE_PATH = Path("relnotes.yaml")
GITHUB_URL = "https://github.com"

HEADING_MODE_AUTO: HeadingMode = "auto"
HEADING_MODE_SECONDARY: HeadingMode = "secondary"
HEADING_MODE_ALL: HeadingMode = "all"
HEADING_MODE_CHOICES: tuple[HeadingMode, ...] = (
    HEADING_MODE_AUTO,
    HEADING_MODE_SECONDARY,
    HEADING_MODE_ALL,
)
DEFAULT_CACHE_TTL = "1h"

_REPOSITORY_PATTERN = re.compile(r"^(?P<owner>[^/]+)/(?P<name>[^/]+)$")


def default_config_path(root: Path) -> Path:
    """Return the default config path for a working directory."""
    return root / CONFIG_RELATIVE_PATH


@dataclass(frozen=True)
class Repository:
    """A GitHub repository contributing release notes."""

    index: int
    owner: str
    name: str
    display_name: str
    include_releases: bool
    report_missing: bool = False

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"{GITHUB_URL}/{self.owner}/{self.name}"

    @property
    def is_primary(self) -> bool:
        return self.index == 0


def parse_repository(value: str) -> tuple[str, str]:
    """Split an ``owner/name`` identifier, rejecting anything else."""
    match = _REPOSITORY_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"invalid repository: {value}")
    return match.group("owner"), match.group("name")


def build_repositories(
    slugs: Sequence[str],
    *,
    names: Sequence[str | None] = (),
    releases: Sequence[bool | None] = (),
    missing: Sequence[bool | None] = (),
) -> list[Repository]:
    """Create repositories from identifiers and positional per-repository options.

    Options are matched to repositories by position. Unset values fall back to
    the defaults: only the primary repository includes its releases, no
    repository reports missing releases, and the display name is the slug.
    """
    repositories: list[Repository] = []
    for index, slug in enumerate(slugs):
        owner, name = parse_repository(slug)
        display_name = names[index] if index < len(names) else None
        include = releases[index] if index < len(releases) else None
        report = missing[index] if index < len(missing) else None
        repositories.append(
            Repository(
                index=index,
                owner=owner,
                name=name,
                display_name=display_name or f"{owner}/{name}",
                include_releases=(index == 0) if include is None else include,
                report_missing=bool(report),
            )
        )
    return repositories


@dataclass
class Config:
    """Structured representation of the relnotes config."""

    repositories: list[Repository] = field(default_factory=list)
    headings: HeadingMode = HEADING_MODE_AUTO
    merge: bool = False
    list_pattern: str = DEFAULT_LIST_ITEM_PATTERN
    normalize: bool = False
    include: str | None = None
    exclude: str | None = None
    from_tag: str | None = None
    to_tag: str | None = None
    output: Path | None = None
    preamble: bool = True
    cache_ttl: str = DEFAULT_CACHE_TTL


def _optional_bool(raw: MutableMapping[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config option '{key}' must be a boolean.")
    return value


def _optional_str(raw: MutableMapping[str, Any], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ValueError(f"Config option '{key}' must be a string.")
    text = str(value).strip()
    return text or None


def parse_heading_mode(value: object, *, option: str = "headings") -> HeadingMode:
    """Validate a heading mode value."""
    if not isinstance(value, str):
        raise ValueError(f"Config option '{option}' must be a string.")
    normalized = value.strip().lower()
    if normalized not in HEADING_MODE_CHOICES:
        allowed = ", ".join(HEADING_MODE_CHOICES)
        raise ValueError(f"Config option '{option}' must be one of: {allowed}")
    return cast(HeadingMode, normalized)


def _parse_repositories(values: object) -> list[Repository]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValueError("Config option 'repositories' must be a list.")
    slugs: list[str] = []
    names: list[str | None] = []
    releases: list[bool | None] = []
    missing: list[bool | None] = []
    for item in values:
        if isinstance(item, str):
            slugs.append(item)
            names.append(None)
            releases.append(None)
            missing.append(None)
            continue
        if not isinstance(item, MutableMapping):
            raise ValueError("Config option 'repositories' must contain strings or mappings.")
        slug = item.get("repo")
        if not isinstance(slug, str) or not slug.strip():
            raise ValueError("Config repositories require a 'repo' field of the form owner/name.")
        slugs.append(slug)
        name = item.get("name")
        names.append(str(name).strip() if name is not None else None)
        for key, target in (("releases", releases), ("missing", missing)):
            value = item.get(key)
            if value is not None and not isinstance(value, bool):
                raise ValueError(f"Config option 'repositories.{key}' must be a boolean.")
            target.append(value)
    return build_repositories(slugs, names=names, releases=releases, missing=missing)


def load_config(path: Path) -> Config:
    """Load the configuration from disk."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, MutableMapping):
        raise ValueError("Config root must be a mapping")

    headings: HeadingMode = HEADING_MODE_AUTO
    if raw.get("headings") is not None:
        headings = parse_heading_mode(raw["headings"])

    output_raw = _optional_str(raw, "output")

    return Config(
        repositories=_parse_repositories(raw.get("repositories")),
        headings=headings,
        merge=_optional_bool(raw, "merge", False),
        list_pattern=_optional_str(raw, "list_pattern") or DEFAULT_LIST_ITEM_PATTERN,
        normalize=_optional_bool(raw, "normalize", False),
        include=_optional_str(raw, "include"),
        exclude=_optional_str(raw, "exclude"),
        from_tag=_optional_str(raw, "from"),
        to_tag=_optional_str(raw, "to"),
        output=Path(output_raw) if output_raw else None,
        preamble=_optional_bool(raw, "preamble", True),
        cache_ttl=_optional_str(raw, "cache_ttl") or DEFAULT_CACHE_TTL,
    )


def _dump_repository(repository: Repository) -> str | dict[str, Any]:
    data: dict[str, Any] = {"repo": repository.slug}
    if repository.display_name != repository.slug:
        data["name"] = repository.display_name
    if repository.include_releases != repository.is_primary:
        data["releases"] = repository.include_releases
    if repository.report_missing:
        data["missing"] = True
    if len(data) == 1:
        return repository.slug
    return data


def dump_config(config: Config) -> dict[str, Any]:
    """Convert a Config into a plain dictionary suitable for YAML output."""
    data: dict[str, Any] = {
        "repositories": [_dump_repository(repository) for repository in config.repositories],
    }
    if config.headings != HEADING_MODE_AUTO:
        data["headings"] = config.headings
    if config.merge:
        data["merge"] = True
    if config.list_pattern != DEFAULT_LIST_ITEM_PATTERN:
        data["list_pattern"] = config.list_pattern
    if config.normalize:
        data["normalize"] = True
    if config.include:
        data["include"] = config.include
    if config.exclude:
        data["exclude"] = config.exclude
    if config.from_tag:
        data["from"] = config.from_tag
    if config.to_tag:
        data["to"] = config.to_tag
    if config.output is not None:
        data["output"] = str(config.output)
    if not config.preamble:
        data["preamble"] = False
    if config.cache_ttl != DEFAULT_CACHE_TTL:
        data["cache_ttl"] = config.cache_ttl
    return data


def save_config(config: Config, path: Path) -> None:
    """Write the configuration to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(dump_config(config), handle, sort_keys=False)
