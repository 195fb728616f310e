"""Tests for retrieving releases through the GitHub CLI."""

from __future__ import annotations

import json
import subprocess
from typing import Any

import pytest

from relnotes import github
from relnotes.config import build_repositories

WIDGETS, GEARS = build_repositories(["acme/widgets", "acme/gears"])


def release_lines(*payloads: dict[str, Any]) -> str:
    return "".join(json.dumps(payload) + "\n" for payload in payloads)


def test_fetch_releases_parses_gh_output(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append(command)
        assert kwargs["check"] is True
        stdout = release_lines(
            {"tag_name": "v1.0.1", "created_at": "2024-01-02T00:00:00Z", "body": "- Fix crash"},
            {"tag_name": "v1.0.0", "created_at": "2024-01-01T00:00:00Z", "body": None},
        )
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(github.shutil, "which", lambda name: "/usr/bin/gh")
    monkeypatch.setattr(github.subprocess, "run", fake_run)

    records = github.fetch_releases(WIDGETS)

    assert [record.tag for record in records] == ["v1.0.1", "v1.0.0"]
    assert records[0].body == "- Fix crash"
    assert records[1].body is None
    assert calls == [
        [
            "/usr/bin/gh",
            "api",
            "--paginate",
            "--jq",
            ".[] | {tag_name, created_at, body}",
            "--cache",
            "1h",
            "repos/acme/widgets/releases?per_page=100",
        ]
    ]


def test_refresh_skips_the_cache() -> None:
    command = github.build_gh_command("gh", GEARS, cache_ttl="30m", refresh=True)
    assert "--cache" not in command
    assert command[-1] == "repos/acme/gears/releases?per_page=100"
    assert "30m" in github.build_gh_command("gh", GEARS, cache_ttl="30m")


def test_fetch_all_releases_keys_by_index(monkeypatch: pytest.MonkeyPatch) -> None:
    order: list[str] = []

    def fake_fetch(repository: Any, **kwargs: Any) -> list[Any]:
        order.append(repository.slug)
        return []

    monkeypatch.setattr(github, "fetch_releases", fake_fetch)
    assert github.fetch_all_releases([WIDGETS, GEARS]) == {0: [], 1: []}
    assert order == ["acme/widgets", "acme/gears"]


def test_missing_gh_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(github.shutil, "which", lambda name: None)
    with pytest.raises(RuntimeError, match="'gh' CLI is required"):
        github.fetch_releases(WIDGETS)


def test_failed_gh_call_names_repository(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(1, command, output="", stderr="HTTP 404: Not Found\n")

    monkeypatch.setattr(github.shutil, "which", lambda name: "/usr/bin/gh")
    monkeypatch.setattr(github.subprocess, "run", fake_run)
    with pytest.raises(RuntimeError) as excinfo:
        github.fetch_releases(WIDGETS)
    assert str(excinfo.value) == (
        "failed to retrieve releases from acme/widgets: HTTP 404: Not Found"
    )


def test_malformed_output_is_rejected() -> None:
    with pytest.raises(ValueError, match="line 2"):
        github.parse_release_lines(
            WIDGETS,
            release_lines({"tag_name": "v1", "created_at": "2024-01-01"}) + "not json\n",
        )
    with pytest.raises(ValueError, match="unexpected release payload"):
        github.parse_release_lines(WIDGETS, "[1, 2]\n")
