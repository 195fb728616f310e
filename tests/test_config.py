"""Unit tests for configuration helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from relnotes.config import (
    Config,
    build_repositories,
    dump_config,
    load_config,
    parse_repository,
    save_config,
)
from relnotes.merging import DEFAULT_LIST_ITEM_PATTERN


def write_yaml(path: Path, content: dict[str, object]) -> None:
    path.write_text(yaml.safe_dump(content, sort_keys=False), encoding="utf-8")


def test_load_config_reads_all_options(tmp_path: Path) -> None:
    config_path = tmp_path / "relnotes.yaml"
    write_yaml(
        config_path,
        {
            "repositories": [
                "acme/widgets",
                {"repo": "acme/gears", "name": "Gears", "releases": True, "missing": True},
            ],
            "headings": "Secondary",
            "merge": True,
            "include": "^v",
            "exclude": "-rc",
            "from": "v1.0.0",
            "to": "v2.0.0",
            "output": "CHANGELOG.md",
            "preamble": False,
            "cache_ttl": "30m",
        },
    )

    config = load_config(config_path)

    primary, gears = config.repositories
    assert primary.slug == "acme/widgets"
    assert primary.display_name == "acme/widgets"
    assert primary.include_releases and primary.is_primary
    assert gears.display_name == "Gears"
    assert gears.include_releases and gears.report_missing
    assert gears.url == "https://github.com/acme/gears"
    assert config.headings == "secondary"
    assert config.merge is True
    assert config.list_pattern == DEFAULT_LIST_ITEM_PATTERN
    assert (config.from_tag, config.to_tag) == ("v1.0.0", "v2.0.0")
    assert config.output == Path("CHANGELOG.md")
    assert config.preamble is False
    assert config.cache_ttl == "30m"


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "relnotes.yaml"
    config_path.write_text("", encoding="utf-8")
    assert load_config(config_path) == Config()


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ({"headings": "loud"}, "Config option 'headings' must be one of: auto, secondary, all"),
        ({"merge": "yes"}, "Config option 'merge' must be a boolean."),
        ({"repositories": "acme/widgets"}, "Config option 'repositories' must be a list."),
        ({"repositories": [{"name": "x"}]}, "'repo' field"),
        ({"repositories": ["widgets"]}, "invalid repository: widgets"),
    ],
)
def test_invalid_config_values(tmp_path: Path, content: dict[str, object], message: str) -> None:
    config_path = tmp_path / "relnotes.yaml"
    write_yaml(config_path, content)
    with pytest.raises(ValueError) as excinfo:
        load_config(config_path)
    assert message in str(excinfo.value)


def test_parse_repository_requires_owner_and_name() -> None:
    assert parse_repository("acme/widgets") == ("acme", "widgets")
    for value in ("acme", "acme/widgets/extra", "/widgets", "acme/"):
        with pytest.raises(ValueError, match="invalid repository"):
            parse_repository(value)


def test_build_repositories_applies_options_by_position() -> None:
    first, second, third = build_repositories(
        ["a/one", "b/two", "c/three"],
        names=["One"],
        releases=[None, True],
        missing=[False, False, True],
    )
    assert (first.display_name, second.display_name) == ("One", "b/two")
    assert [repo.include_releases for repo in (first, second, third)] == [True, True, False]
    assert third.report_missing and not first.report_missing
    assert [repo.index for repo in (first, second, third)] == [0, 1, 2]


def test_save_config_omits_defaults(tmp_path: Path) -> None:
    config = Config(
        repositories=build_repositories(["acme/widgets", "acme/gears"], names=[None, "Gears"]),
        merge=True,
    )
    assert dump_config(config) == {
        "repositories": ["acme/widgets", {"repo": "acme/gears", "name": "Gears"}],
        "merge": True,
    }
    config_path = tmp_path / "relnotes.yaml"
    save_config(config, config_path)
    assert load_config(config_path) == config
